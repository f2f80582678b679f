"""Shared test setup: in-memory SQLite user store. Import before any app module."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("APP_ENV", "dev")

from collections.abc import Iterable

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import enable_sqlite_foreign_keys
from app.core.security import hash_password
from app.models import Authority, Base, User


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with the users/authorities schema."""
    engine = enable_sqlite_foreign_keys(
        create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_user(
    db: Session,
    username: str,
    password: str,
    enabled: bool = True,
    authorities: Iterable[str] = ("ROLE_USER",),
) -> None:
    """Insert a user row (bcrypt-hashed password) plus its authority rows."""
    db.add(
        User(
            username=username,
            password=hash_password(password),
            enabled=enabled,
            authorities=[Authority(authority=a) for a in authorities],
        )
    )
    db.commit()
