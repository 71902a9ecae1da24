# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.STELLAR_HORIZON_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Network passphrases used when signing/identifying Stellar transactions
STELLAR_PASSPHRASES = {
    "testnet": "Test SDF Network ; September 2015",
    "public": "Public Global Stellar Network ; September 2015",
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    APP_URL: str = Field(
        default="https://stellarcert.com",
        description="Public frontend URL used to build links in emails"
    )

    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Maximum time a request handler may run before a 408 is returned"
    )

    # CORS origins (comma-separated string that gets parsed)
    ALLOWED_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Database (Supabase / Postgres)
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    # -------------------------------------------------------------------------
    # JWT Authentication
    # -------------------------------------------------------------------------

    JWT_SECRET: str = Field(
        ...,
        min_length=16,
        description="Secret key for signing access tokens"
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )

    JWT_EXPIRES_IN_MINUTES: int = Field(
        default=60 * 24,
        ge=1,
        description="Access token lifetime in minutes"
    )

    # -------------------------------------------------------------------------
    # Stellar Network
    # -------------------------------------------------------------------------

    STELLAR_NETWORK: Literal["testnet", "public"] = Field(
        default="testnet",
        description="Stellar network the backend verifies against"
    )

    STELLAR_HORIZON_URL: str = Field(
        default="https://horizon-testnet.stellar.org",
        description="Horizon server used for transaction/account lookups"
    )

    STELLAR_ISSUER_PUBLIC_KEY: str | None = Field(
        default=None,
        description="Public key of the platform issuing account"
    )

    STELLAR_ISSUER_SECRET_KEY: str | None = Field(
        default=None,
        description="Secret key of the platform issuing account"
    )

    # -------------------------------------------------------------------------
    # Error Tracking (Sentry)
    # -------------------------------------------------------------------------

    SENTRY_DSN: str | None = Field(
        default=None,
        description="Sentry DSN for error reporting"
    )

    ENABLE_SENTRY: bool = Field(
        default=False,
        description="Forward 5xx errors to Sentry"
    )

    # -------------------------------------------------------------------------
    # Email
    # -------------------------------------------------------------------------

    EMAIL_SERVICE: Literal["smtp", "sendgrid"] | None = Field(
        default=None,
        description="Email provider; SendGrid is used automatically if SENDGRID_API_KEY is set"
    )

    EMAIL_HOST: str = Field(
        default="smtp.mailtrap.io",
        description="SMTP server hostname"
    )

    EMAIL_PORT: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port (465 = implicit TLS)"
    )

    EMAIL_USERNAME: str | None = Field(
        default=None,
        description="SMTP username"
    )

    EMAIL_PASSWORD: str | None = Field(
        default=None,
        description="SMTP password"
    )

    EMAIL_FROM: str = Field(
        default="noreply@stellarcert.com",
        description="Sender address for outgoing mail"
    )

    SENDGRID_API_KEY: str | None = Field(
        default=None,
        description="SendGrid API key (used as SMTP password on the SendGrid relay)"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------
    # Default to localhost for development

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # Each prefork child serves its own metrics on WORKER_METRICS_PORT + N
    WORKER_METRICS_PORT: int = Field(
        default=9540,
        description="Base port for Celery worker /metrics (0 disables)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
        # .env may carry keys for other tools (celery, uvicorn)
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def allowed_origins_list(self) -> list[str]:
        """
        Parse ALLOWED_ORIGINS string into a list.

        Example: "http://localhost:5173, https://app.stellarcert.com"
            -> ["http://localhost:5173", "https://app.stellarcert.com"]
        """
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def stellar_network_passphrase(self) -> str:
        """Network passphrase matching STELLAR_NETWORK."""
        return STELLAR_PASSPHRASES[self.STELLAR_NETWORK]

    @property
    def uses_sendgrid(self) -> bool:
        """True when mail should go through the SendGrid SMTP relay."""
        return self.EMAIL_SERVICE == "sendgrid" or bool(self.SENDGRID_API_KEY)

    @property
    def smtp_options(self) -> dict[str, Any]:
        """
        Connection options for aiosmtplib.send().

        SendGrid is reached through its SMTP relay with the API key as
        password. Plain SMTP uses implicit TLS on port 465 and STARTTLS
        otherwise.
        """
        if self.uses_sendgrid:
            return {
                "hostname": "smtp.sendgrid.net",
                "port": 587,
                "username": "apikey",
                "password": self.SENDGRID_API_KEY,
                "start_tls": True,
            }

        options: dict[str, Any] = {
            "hostname": self.EMAIL_HOST,
            "port": self.EMAIL_PORT,
            "username": self.EMAIL_USERNAME,
            "password": self.EMAIL_PASSWORD,
        }
        if self.EMAIL_PORT == 465:
            options["use_tls"] = True
        else:
            options["start_tls"] = True
        return options


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


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
