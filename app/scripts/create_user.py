"""
Create a login user with one or more authorities. Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [--authority ROLE ...] [--disabled]
Example:
  python -m app.scripts.create_user user password --authority ROLE_USER
"""
import argparse
import logging
import sys

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.core.security import (
    AUTHORITY_MAX_LEN,
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    hash_password,
    password_too_long,
)
from app.models import Authority, User

logger = logging.getLogger(__name__)

DEFAULT_AUTHORITY = "ROLE_USER"


def create_user(
    db: Session,
    username: str,
    password: str,
    authorities: list[str],
    enabled: bool = True,
) -> User:
    """Insert a user row and its authority rows; raises ValueError on bad input or duplicates."""
    username = username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        raise ValueError(f"Username must be 1-{USERNAME_MAX_LEN} characters.")
    if len(password) < PASSWORD_MIN_LEN or password_too_long(password):
        raise ValueError(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_BYTES} bytes in UTF-8."
        )
    cleaned = []
    for authority in authorities:
        authority = authority.strip()
        if not authority or len(authority) > AUTHORITY_MAX_LEN:
            raise ValueError(f"Authority must be 1-{AUTHORITY_MAX_LEN} characters.")
        if authority not in cleaned:
            cleaned.append(authority)
    if not cleaned:
        raise ValueError("At least one authority is required.")

    if db.get(User, username) is not None:
        raise ValueError(f"User '{username}' already exists.")
    user = User(
        username=username,
        password=hash_password(password),
        enabled=enabled,
        authorities=[Authority(authority=a) for a in cleaned],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Another process inserted the same username after the lookup above.
        db.rollback()
        raise ValueError(f"User '{username}' already exists.") from e
    return user


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    parser = argparse.ArgumentParser(description="Create a login user (no registration UI).")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_BYTES} bytes)")
    parser.add_argument(
        "--authority",
        action="append",
        dest="authorities",
        help=f"Authority to grant; repeatable (default {DEFAULT_AUTHORITY})",
    )
    parser.add_argument("--disabled", action="store_true", help="Create the account disabled")
    args = parser.parse_args(argv)

    granted = args.authorities or [DEFAULT_AUTHORITY]
    db = SessionLocal()
    try:
        create_user(
            db,
            args.username,
            args.password,
            granted,
            enabled=not args.disabled,
        )
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()
    logger.info(
        "Created user '%s' (enabled=%s) with authorities %s",
        args.username.strip(),
        not args.disabled,
        ", ".join(granted),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
