"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "sqlite://",
    "sqlite+pysqlite://",
)

DEFAULT_SESSION_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_V1_PREFIX: str = "/api/v1"

    # Database: URL plus optional driver/credential overrides supplied separately
    DATABASE_URL: str = "postgresql://localhost:5432/gatekeep"
    DATABASE_DRIVER: str | None = None
    DATABASE_USERNAME: str | None = None
    DATABASE_PASSWORD: SecretStr | None = None

    # Login sessions: signed cookie bound to a server-side session entry
    SESSION_SECRET: SecretStr = SecretStr(DEFAULT_SESSION_SECRET)
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "SESSION"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_IDLE_TIMEOUT_MINUTES: int = 30
    SESSION_MAX_AGE_MINUTES: int = 480

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL (e.g. postgresql:// or sqlite://)"
            )
        return v.strip()

    @field_validator("DATABASE_DRIVER", "DATABASE_USERNAME")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("SESSION_SECRET")
    @classmethod
    def validate_session_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("SESSION_SECRET must be set and non-empty")
        return v

    @field_validator("SESSION_ALGORITHM")
    @classmethod
    def validate_session_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SESSION_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("SESSION_COOKIE_NAME")
    @classmethod
    def validate_session_cookie_name(cls, v: str) -> str:
        if not v or not v.strip() or any(c in v for c in " ;,="):
            raise ValueError("SESSION_COOKIE_NAME must be a non-empty cookie token")
        return v.strip()

    @field_validator("SESSION_IDLE_TIMEOUT_MINUTES")
    @classmethod
    def validate_session_idle_timeout(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError(
                "SESSION_IDLE_TIMEOUT_MINUTES must be between 1 and 1440 (1 min to 1 day)"
            )
        return v

    @field_validator("SESSION_MAX_AGE_MINUTES")
    @classmethod
    def validate_session_max_age(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "SESSION_MAX_AGE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v

    @model_validator(mode="after")
    def check_prod_secret(self) -> "Settings":
        if self.APP_ENV == "prod" and (
            self.SESSION_SECRET.get_secret_value() == DEFAULT_SESSION_SECRET
        ):
            raise ValueError("SESSION_SECRET must be changed from the default in prod")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
