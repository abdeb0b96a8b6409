"""
Configuration module for the starter API.

This module uses Pydantic Settings to load environment variables for the
HTTP server, Facebook login, session cookies, CORS and the demo routes.

Every variable is optional: a missing value falls back to a literal default
(including placeholder OAuth credentials) so the template boots with an
empty environment. Values are loaded from a .env file or the system
environment.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PLACEHOLDER_CREDENTIAL = "xxx"
DEFAULT_SESSION_SECRET = "your-secret-key"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Built once and handed to ``create_app``; components read it from
    ``app.state.settings`` rather than from module globals.
    """

    # =========================================================================
    # Server Configuration
    # =========================================================================

    PORT: int = Field(
        default=5000,
        description="Port to bind the HTTP server",
        ge=1,
        le=65535,
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the HTTP server",
    )

    BASE_URL: Optional[str] = Field(
        default=None,
        description="Public base URL (defaults to http://localhost:{PORT})",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Facebook OAuth Configuration
    # =========================================================================

    FACEBOOK_APP_ID: str = Field(
        default=PLACEHOLDER_CREDENTIAL,
        description="Facebook App ID",
    )

    FACEBOOK_APP_SECRET: str = Field(
        default=PLACEHOLDER_CREDENTIAL,
        description="Facebook App Secret",
    )

    FACEBOOK_GRAPH_API_VERSION: str = Field(
        default="v18.0",
        description="Graph API version used for the dialog, token and profile endpoints",
    )

    FACEBOOK_PROFILE_FIELDS: str = Field(
        default="id,displayName,photos,email",
        description="Comma-separated profile fields to request",
    )

    FACEBOOK_SCOPE: str = Field(
        default="",
        description="Comma-separated OAuth scopes (empty requests none)",
    )

    # =========================================================================
    # Session Configuration
    # =========================================================================

    SESSION_SECRET: str = Field(
        default=DEFAULT_SESSION_SECRET,
        description="Secret used to sign the session cookie",
    )

    SESSION_COOKIE_NAME: str = Field(
        default="starter.sid",
        description="Name of the session cookie",
    )

    SESSION_MAX_AGE_SECONDS: int = Field(
        default=86400,
        description="Session lifetime in seconds",
        ge=60,
    )

    # =========================================================================
    # CORS Configuration
    # =========================================================================

    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # =========================================================================
    # Demo Routes
    # =========================================================================

    DEMO_API_URL: str = Field(
        default="https://httpbin.org",
        description="External endpoint called by GET /api",
    )

    SELF_PING_INTERVAL_SECONDS: Optional[int] = Field(
        default=None,
        description="Self-ping period; unset leaves the keep-alive loop off",
        ge=1,
    )

    # =========================================================================
    # Error Handling
    # =========================================================================

    EXPOSE_ERROR_DETAILS: bool = Field(
        default=True,
        description="Echo the raw failure text in 500 responses",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def base_url(self) -> str:
        """Public base URL without a trailing slash."""
        if self.BASE_URL:
            return self.BASE_URL.rstrip("/")
        return f"http://localhost:{self.PORT}"

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origins; ``["*"]`` when left at the default.
        """
        origins = [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]
        return origins or ["*"]

    @property
    def facebook_profile_fields_list(self) -> List[str]:
        return [f.strip() for f in self.FACEBOOK_PROFILE_FIELDS.split(",") if f.strip()]

    @property
    def facebook_scope_list(self) -> List[str]:
        return [s.strip() for s in self.FACEBOOK_SCOPE.split(",") if s.strip()]

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalise the log level name.

        Raises:
            ValueError: If the level is not a standard logging level
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = v.upper()

        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create the process-wide Settings instance.

    Cached so the environment is read only once during the application
    lifecycle.

    Example:
        >>> from starter_api.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.base_url)
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Check the settings for insecure fallbacks and return a status report.

    Missing values never fail startup, so everything found here is reported
    as a warning.

    Returns:
        Dictionary with validation status and any warnings.
    """
    errors = []
    warnings = []

    if settings.FACEBOOK_APP_ID == PLACEHOLDER_CREDENTIAL:
        warnings.append("FACEBOOK_APP_ID is not set (using placeholder)")

    if settings.FACEBOOK_APP_SECRET == PLACEHOLDER_CREDENTIAL:
        warnings.append("FACEBOOK_APP_SECRET is not set (using placeholder)")

    if settings.SESSION_SECRET == DEFAULT_SESSION_SECRET:
        warnings.append("SESSION_SECRET is the built-in default")

    if not settings.BASE_URL:
        warnings.append(f"BASE_URL is not set (using {settings.base_url})")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "base_url": settings.base_url,
    }
