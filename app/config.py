# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   print(get_settings().JWT_SECRET)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    The running app reads its settings from `app.state.settings`, so tests
    can build an app around their own Settings instance.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    JWT_SECRET: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing tokens"
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="HMAC algorithm used to sign tokens"
    )

    JWT_EXPIRES_DAYS: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Days before an issued token expires"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------

    DATABASE_URL: str = Field(
        default="sqlite:///./trackflow.sqlite3",
        description="SQLAlchemy database URL"
    )

    DATABASE_ECHO: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # -------------------------------------------------------------------------
    # Response Envelope
    # -------------------------------------------------------------------------
    # always_ok:   every enveloped response is HTTP 200; status lives in `code`
    # mirror_code: HTTP status is derived from `code` (401, 404, 500, ...)

    ENVELOPE_STATUS_MODE: Literal["always_ok", "mirror_code"] = Field(
        default="always_ok",
        description="How HTTP status relates to the envelope code"
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    LOG_FILE: str | None = Field(
        default=None,
        description="Optional path of a rotating log file"
    )

    LOG_MAX_BYTES: int = Field(
        default=10 * 1024 * 1024,
        ge=1024,
        description="Rotate the log file after this many bytes"
    )

    LOG_BACKUP_COUNT: int = Field(
        default=20,
        ge=0,
        description="Number of rotated log files to keep"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat empty env vars as unset
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def token_ttl(self) -> timedelta:
        """Lifetime of an issued token."""
        return timedelta(days=self.JWT_EXPIRES_DAYS)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()

