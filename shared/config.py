"""
Shared configuration management for the Response Cache service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="RESPONSE_CACHE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Backing store
    cache_backend: str = Field(default="memory", description="memory or redis")
    redis_url: str = Field(default="redis://localhost:6379/0")
    key_prefix: str = Field(default="fqc:", description="Namespace for every store key")

    # Cache key derivation
    canonicalize_cache_keys: bool = Field(
        default=True,
        description="Sort mapping keys before hashing; disable to keep insertion order",
    )

    # Suspension point timeouts (unset means wait indefinitely)
    hook_timeout_seconds: Optional[float] = Field(default=None)
    store_timeout_seconds: Optional[float] = Field(default=None)

    # Host pipeline
    session_header: str = Field(default="X-Session-Id")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
