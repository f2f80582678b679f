"""ORM models for the login user store: users and their authorities."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from app.models.base import Base


class User(Base):
    """
    Login account. password holds the bcrypt output string, never plain text.

    A user with enabled=False can never obtain a session.
    """

    __tablename__ = "users"

    username = Column(String(50), primary_key=True)
    password = Column(String(500), nullable=False)
    enabled = Column(Boolean, nullable=False)

    authorities = relationship(
        "Authority",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class Authority(Base):
    """Role label granted to a user, e.g. ROLE_USER. Unique per (username, authority)."""

    __tablename__ = "authorities"
    __table_args__ = (
        Index("ix_auth_username", "username", "authority", unique=True),
    )

    username = Column(
        String(50),
        ForeignKey("users.username", name="fk_authorities_users"),
        nullable=False,
    )
    authority = Column(String(50), nullable=False)

    # The table has no primary key; the unique index identifies a row for the ORM.
    __mapper_args__ = {"primary_key": [username, authority]}

    user = relationship("User", back_populates="authorities")
