"""Credential verification against the users/authorities tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NoReturn

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.security import (
    DUMMY_PASSWORD_HASH,
    USERNAME_MAX_LEN,
    password_too_long,
    verify_password,
)
from app.schemas.auth import Principal

logger = logging.getLogger(__name__)

USERS_BY_USERNAME_QUERY = "select username, password, enabled from users where username=:username"
AUTHORITIES_BY_USERNAME_QUERY = "select username, authority from authorities where username=:username"

# Reasons are logged only; callers always see the same failure.
REASON_BAD_INPUT = "bad_input"
REASON_UNKNOWN_USER = "unknown_user"
REASON_BAD_CREDENTIALS = "bad_credentials"
REASON_DISABLED = "disabled"
REASON_NO_AUTHORITIES = "no_authorities"


class AuthenticationError(Exception):
    """Raised when credentials are rejected. The message never says which check failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        self.message = "Invalid username and password."
        super().__init__(self.message)


@dataclass(frozen=True)
class UserRecord:
    """Row returned by the user lookup query."""

    username: str
    password: str
    enabled: bool


class UserDetailsRepository:
    """Runs the two fixed lookup queries, parameterized by username."""

    def __init__(
        self,
        users_query: str = USERS_BY_USERNAME_QUERY,
        authorities_query: str = AUTHORITIES_BY_USERNAME_QUERY,
    ) -> None:
        self._users_query = text(users_query)
        self._authorities_query = text(authorities_query)

    def find_user(self, db: Session, username: str) -> UserRecord | None:
        row = db.execute(self._users_query, {"username": username}).first()
        if row is None:
            return None
        return UserRecord(username=row[0], password=row[1], enabled=bool(row[2]))

    def find_authorities(self, db: Session, username: str) -> frozenset[str]:
        rows = db.execute(self._authorities_query, {"username": username}).all()
        return frozenset(row[1] for row in rows)


class CredentialVerifier:
    """
    Verify a username/password pair and build the session principal.

    Unknown user, disabled account, a user without authorities and a password
    mismatch all raise the same AuthenticationError. An unknown username still
    costs one bcrypt verification so timing does not reveal which users exist.
    """

    def __init__(self, repository: UserDetailsRepository | None = None) -> None:
        self.repository = repository or UserDetailsRepository()

    def authenticate(self, db: Session, username: str, password: str) -> Principal:
        if not username or len(username) > USERNAME_MAX_LEN or password_too_long(password):
            self._reject(username, REASON_BAD_INPUT)

        user = self.repository.find_user(db, username)
        if user is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            self._reject(username, REASON_UNKNOWN_USER)

        password_ok = verify_password(password, user.password)
        if not user.enabled:
            self._reject(username, REASON_DISABLED)
        if not password_ok:
            self._reject(username, REASON_BAD_CREDENTIALS)

        authorities = self.repository.find_authorities(db, user.username)
        if not authorities:
            self._reject(username, REASON_NO_AUTHORITIES)

        logger.info("Authentication succeeded: username=%s", user.username)
        return Principal(username=user.username, authorities=authorities)

    @staticmethod
    def _reject(username: str, reason: str) -> NoReturn:
        logger.info("Authentication failed: username=%r reason=%s", username[:USERNAME_MAX_LEN], reason)
        raise AuthenticationError(reason)
