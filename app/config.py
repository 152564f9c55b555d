# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.base_path)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lib.origins import build_allowlist, normalize_base_path


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
    # Server
    # -------------------------------------------------------------------------

    PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    NODE_ENV: str = Field(
        default="development",
        description="Runtime environment (any name); cron jobs only run in-process in \"development\""
    )

    BASE_PATH: str = Field(
        default="",
        description="Prefix for every feature route group (e.g. /api). Full URLs are reduced to their path"
    )

    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Requests running longer than this get a 504"
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------

    # Comma-separated, e.g. "https://app.example.com,http://localhost:5173"
    FRONTEND_ORIGIN: str = Field(
        default="",
        description="Allowed browser origins (comma-separated). Empty blocks all cross-origin browsers"
    )

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (used for Supabase Auth sign-in)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        min_length=16,
        description="Secret used to verify HS256 access tokens"
    )

    JWT_AUDIENCE: str = Field(
        default="authenticated",
        description="Expected 'aud' claim of access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Debugging
    # -------------------------------------------------------------------------

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    DEBUG_ROOT_ERROR: bool = Field(
        default=False,
        description="Make GET / raise a test error to exercise the error handler"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Empty env vars fall back to defaults
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def base_path(self) -> str:
        """
        Normalized BASE_PATH.

        Example: "/api/" -> "/api", "/" -> "", "https://x.com/api" -> "/api"
        """
        return normalize_base_path(self.BASE_PATH)

    @property
    def allowed_origins(self) -> frozenset[str]:
        """
        Parse FRONTEND_ORIGIN into the CORS allowlist.

        Example: "https://a.com/, https://b.com" -> {"https://a.com", "https://b.com"}
        """
        return build_allowlist(self.FRONTEND_ORIGIN)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.NODE_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.NODE_ENV == "production"


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
