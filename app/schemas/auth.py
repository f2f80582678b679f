"""Schemas for the authenticated principal and the login form."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.security import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LEN,
    USERNAME_MAX_LEN,
    password_too_long,
)


class Principal(BaseModel):
    """Authenticated identity attached to a session after credential verification."""

    model_config = ConfigDict(frozen=True)

    username: str
    authorities: frozenset[str] = Field(default_factory=frozenset)

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


class LoginForm(BaseModel):
    """Credentials submitted by the login form."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes in UTF-8")
        return v
