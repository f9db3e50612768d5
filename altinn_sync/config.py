"""Service configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class AltinnConfig(BaseSettings):
    """Remote API access settings."""

    model_config = {"env_prefix": "ALTINN_"}

    scheme: str = Field(default="https", description="URI scheme used for tenant hosts")
    timeout_seconds: float = Field(default=30.0, description="Per-request HTTP timeout")
    api_keys: dict[str, SecretStr] = Field(
        default_factory=dict,
        description="API keys by tenant credential reference (JSON object)",
    )
    default_api_key: SecretStr | None = Field(
        default=None,
        description="API key used when a tenant's credential reference has no entry",
    )


class RetryConfig(BaseSettings):
    """Retry / backoff settings driven by Tenacity, applied per remote call."""

    model_config = {"env_prefix": "RETRY_"}

    max_attempts: int = Field(default=2, description="Maximum attempts per remote call")
    initial_wait_seconds: float = Field(
        default=1.0,
        description="Initial backoff wait in seconds",
    )
    max_wait_seconds: float = Field(
        default=30.0,
        description="Maximum backoff wait in seconds",
    )
    multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")


class SyncConfig(BaseSettings):
    """Root configuration for the sync service.

    Nested configs are populated from their own env-var prefixes.
    """

    model_config = {"env_prefix": "SYNC_"}

    database_url: str = Field(
        default="sqlite+aiosqlite:///altinn_sync.db",
        description="Async SQLAlchemy URL of the tenant store",
    )
    cron: str = Field(
        default="0 6-18 * * 1-5",
        description="Cron expression for scheduled runs",
    )
    max_parallel_tenants: int = Field(
        default=1,
        ge=1,
        description="Tenants synced concurrently (1 = sequential)",
    )
    skip_remaining_on_cancel: bool = Field(
        default=True,
        description="Skip tenants not yet started once a run is cancelled",
    )
    health_port: int = Field(default=8080, description="Port for the HTTP trigger and health endpoints")
    log_json: bool = Field(default=True, description="JSON log output (False for dev console)")
    log_level: str = Field(default="INFO", description="Root log level")

    altinn: AltinnConfig = Field(default_factory=AltinnConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
