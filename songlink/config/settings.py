"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation using Pydantic Settings.

The configuration is organized into logical groups:
- ClientSettings: Defaults for the resolution client (country, key, cache policy)
- TransportConfig: HTTP timeout and opt-in retry behaviour
- WorkerConfig: Shared worker pool used for non-blocking resolution
- LoggingConfig: Logging levels and optional log file
"""

from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "https://api.song.link/v1-alpha.1/links"
DEFAULT_USER_AGENT = "Songlink Python API"


class ClientSettings(BaseModel):
    """Defaults used by SonglinkBuilder when a value is not set explicitly."""

    country: str = "US"
    api_key: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    endpoint: str = DEFAULT_ENDPOINT

    # Resolver cache policy
    cache_size: int = 500
    cache_duration_hours: float = 2.0

    @field_validator("country")
    @classmethod
    def upper_country(cls, value: str) -> str:
        return value.upper()


class TransportConfig(BaseModel):
    """HTTP transport configuration.

    Retries are disabled by default; the Songlink API answers rate limited
    requests with 429 and the client surfaces those as errors.
    """

    timeout: float = 10.0
    retry_count: int = 0
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0


class WorkerConfig(BaseModel):
    """Shared worker pool configuration.

    Threads are started on demand and reused once idle, so the pool only
    grows to ``max_workers`` under sustained concurrent load.
    """

    max_workers: int = 256
    thread_name_prefix: str = "songlink"


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path | None = None


class Settings(BaseSettings):
    """Library settings with environment variable support.

    Environment variables use the ``SONGLINK_`` prefix and ``__`` for nesting:
    - SONGLINK_CLIENT__COUNTRY=GB
    - SONGLINK_CLIENT__API_KEY=...
    - SONGLINK_TRANSPORT__RETRY_COUNT=2

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_prefix="SONGLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    client: ClientSettings = ClientSettings()
    transport: TransportConfig = TransportConfig()
    worker: WorkerConfig = WorkerConfig()
    logging: LoggingConfig = LoggingConfig()


# Singleton instance for library use
settings = Settings()
