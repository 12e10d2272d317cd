"""
Relay configuration using Pydantic Settings.

Provides centralized configuration for:
- The upstream GitHub credential and GraphQL endpoint
- Server bind settings
- Cross-origin headers
- Logging and metrics

All settings support environment variable overrides and .env file loading.
The credential and port use the plain GITHUB_TOKEN and PORT variables; every
other setting uses the "RELAY_" prefix.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, SecretStr, field_validator
from typing import List
from functools import lru_cache


DEFAULT_ALLOWED_HEADERS = [
    "Content-Type",
    "Content-Length",
    "Accept-Encoding",
    "X-CSRF-Token",
    "Authorization",
    "accept",
    "origin",
    "Cache-Control",
    "X-Requested-With",
]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="GitHub GraphQL Relay",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="API version"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Bind host"
    )
    port: int = Field(
        default=8080,
        description="Bind port",
        gt=0,
        lt=65536,
        validation_alias=AliasChoices("PORT", "RELAY_PORT"),
    )

    # =========================================================================
    # GitHub Upstream Settings
    # =========================================================================

    github_token: SecretStr = Field(
        ...,
        description="Bearer token sent to the GitHub GraphQL API",
        validation_alias=AliasChoices("GITHUB_TOKEN", "RELAY_GITHUB_TOKEN"),
    )
    github_graphql_url: str = Field(
        default="https://api.github.com/graphql",
        description="GitHub GraphQL endpoint"
    )
    upstream_timeout_seconds: float = Field(
        default=30.0,
        description="Total timeout for one upstream call in seconds (0 disables it)",
        ge=0
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_allow_origin: str = Field(
        default="*",
        description="Value of Access-Control-Allow-Origin"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Advertise Access-Control-Allow-Credentials"
    )
    cors_allow_headers: List[str] = Field(
        default=DEFAULT_ALLOWED_HEADERS,
        description="Allowed request headers"
    )
    cors_allow_methods: List[str] = Field(
        default=["POST", "OPTIONS", "GET", "PUT"],
        description="Allowed HTTP methods"
    )

    # =========================================================================
    # Monitoring and Logging
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Expose Prometheus metrics"
    )
    metrics_endpoint: str = Field(
        default="/metrics",
        description="Metrics endpoint path"
    )

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: SecretStr) -> SecretStr:
        """Reject an empty or whitespace-only token."""
        if not v.get_secret_value().strip():
            raise ValueError("GITHUB_TOKEN environment variable is required")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    @property
    def upstream_timeout(self) -> float | None:
        """Upstream timeout in seconds, or None when disabled."""
        return self.upstream_timeout_seconds or None

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded only once per process. Raises
    ``pydantic.ValidationError`` when the credential is missing.

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
