"""Shared configuration base classes.

Common settings every long-running component of the monitor needs: logging
and the outbound HTTP client.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "secret",
        "authorization",
        "cookie",
        "api_key",
    ]
    app_environment: str = "production"


class BaseHttpConfig(BaseSettings):
    """Outbound HTTP client configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # None disables the timeout; upstream pagination has no deadline
    http_timeout_seconds: float | None = None
    http_user_agent: str = "netmonitor/0.1"


class BaseServiceConfig(BaseLoggingConfig, BaseHttpConfig):
    """Base configuration combining logging and HTTP settings.

    The otel_service_name should be overridden by the service.
    """

    otel_service_name: str = "unknown"


__all__ = ["BaseLoggingConfig", "BaseHttpConfig", "BaseServiceConfig"]
