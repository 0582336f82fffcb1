# noteflow/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL",
    )

    # Authentication
    ADMIN_API_KEY: str | None = Field(
        default=None,
        description="API key for admin endpoints (scheduler trigger, audit maintenance)",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    CORS_ORIGINS: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")
    LOG_JSON: bool = Field(default=True, description="Emit single-line JSON logs")

    # Trash retention
    TRASH_RETENTION_DAYS: int = Field(
        default=30,
        ge=1,
        description="Days a deleted note or folder stays recoverable before the sweeper purges it",
    )
    EXPIRATION_WARNING_DAYS: int = Field(
        default=7,
        ge=0,
        description="Items with this many days or fewer remaining are flagged 'warning'",
    )
    EXPIRATION_URGENT_DAYS: int = Field(
        default=3,
        ge=0,
        description="Items with this many days or fewer remaining are flagged 'urgent'",
    )

    # Audit log
    AUDIT_LOG_RETENTION_DAYS: int = Field(
        default=365,
        ge=1,
        description="Days audit entries are kept before the audit purge removes them",
    )
    AUDIT_LOG_DEFAULT_LIMIT: int = Field(
        default=100,
        ge=1,
        description="Max entries returned by a per-user audit query",
    )
    ADMIN_AUDIT_LOG_LIMIT: int = Field(
        default=1000,
        ge=1,
        description="Max entries returned by the administrative audit query",
    )

    # Bulk operations
    MAX_BULK_OPERATION_SIZE: int = Field(
        default=100,
        ge=1,
        description="Maximum number of ids accepted by a single bulk request",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @model_validator(mode="after")
    def check_expiration_thresholds(self) -> "Settings":
        if self.EXPIRATION_URGENT_DAYS > self.EXPIRATION_WARNING_DAYS:
            raise ValueError("EXPIRATION_URGENT_DAYS must not exceed EXPIRATION_WARNING_DAYS")
        if self.EXPIRATION_WARNING_DAYS > self.TRASH_RETENTION_DAYS:
            raise ValueError("EXPIRATION_WARNING_DAYS must not exceed TRASH_RETENTION_DAYS")
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
