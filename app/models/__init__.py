"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.user import Authority, User

__all__ = ["Authority", "Base", "User"]
