"""Pydantic request/response schemas."""

from app.schemas.auth import LoginForm, Principal
from app.schemas.health import HealthResponse

__all__ = [
    "HealthResponse",
    "LoginForm",
    "Principal",
]
