"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "One World"
    APP_ENV: str = "development"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment
    API_VERSION: str = "v1"

    # Database - PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "oneworld"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "oneworld"
    # Full URL override (used by tests and local SQLite setups)
    DATABASE_URL: str | None = None
    DB_ECHO: bool = False
    # Create missing tables at startup (local development; production runs scripts/init_db.py)
    DB_CREATE_TABLES: bool = False

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    @property
    def database_url(self) -> str:
        """Resolve the async database URL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # Authentication
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Admin panel session cookie
    ADMIN_SESSION_SECRET: str = "change-this-in-production"
    ADMIN_SESSION_COOKIE: str = "oneworld.admin.sid"
    ADMIN_SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    # Localized texts
    DEFAULT_LANGUAGE: str = "de"

    # Voting rules
    VOTING_MIN_OPTIONS: int = 2
    VOTING_MAX_OPTIONS: int = 5
    VOTING_HISTORY_LIMIT: int = 10


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
