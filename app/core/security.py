"""Password hashing and signed session tokens for form login."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings, settings

# Bcrypt cost (rounds); 10 is the conventional framework default.
BCRYPT_ROUNDS = 10

# Column widths of users.username / authorities.authority and the accepted password range.
USERNAME_MAX_LEN = 50
AUTHORITY_MAX_LEN = 50
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 72
# bcrypt only reads the first 72 bytes; longer passwords are refused rather than truncated.
PASSWORD_MAX_BYTES = 72


def password_too_long(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > PASSWORD_MAX_BYTES


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a plain-text password for storage. Do not store plain passwords.
    Raises ValueError when the password exceeds PASSWORD_MAX_BYTES in UTF-8.
    """
    if password_too_long(plain_password):
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes in UTF-8.")
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored bcrypt string.

    bcrypt.checkpw compares in constant time. Anything that is not a bcrypt
    string ($2a$, $2b$, $2y$) and any password over PASSWORD_MAX_BYTES
    simply fails to verify.
    """
    if password_too_long(plain_password):
        return False
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Verified against when the username is unknown so the miss costs a full bcrypt round.
DUMMY_PASSWORD_HASH = hash_password("userNotFoundPassword")


def create_session_token(
    session_id: str,
    username: str,
    cfg: Settings = settings,
) -> str:
    """Sign a session cookie value binding the session id to the username."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sid": session_id,
        "sub": username,
        "iat": now,
        "exp": now + timedelta(minutes=cfg.SESSION_MAX_AGE_MINUTES),
    }
    return jwt.encode(
        payload,
        cfg.SESSION_SECRET.get_secret_value(),
        algorithm=cfg.SESSION_ALGORITHM,
    )


def decode_session_token(token: str, cfg: Settings = settings) -> dict[str, Any]:
    """
    Decode and validate a session cookie; return payload (sid, sub, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    return jwt.decode(
        token,
        cfg.SESSION_SECRET.get_secret_value(),
        algorithms=[cfg.SESSION_ALGORITHM],
        options={"require": ["sid", "sub", "exp"]},
    )
