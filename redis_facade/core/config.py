"""
Redis Facade Configuration

Configuration management with environment variable support.
Covers connection endpoint, topology selection, pool sizing
and logging.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict, NoDecode
from pydantic import Field, SecretStr, field_validator, model_validator
from typing import Annotated, Optional, List
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Redis facade settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Standalone endpoint
    REDIS_HOST: str = Field(default="localhost", description="Redis host")
    REDIS_PORT: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    REDIS_PASSWORD: Optional[SecretStr] = Field(
        default=None, description="Redis password"
    )
    REDIS_DATABASE: int = Field(
        default=0, ge=0, le=15, description="Logical database index"
    )

    # Sentinel topology
    REDIS_SENTINEL_ENABLED: bool = Field(
        default=False, description="Connect through Redis Sentinel"
    )
    REDIS_SENTINEL_MASTER: Optional[str] = Field(
        default=None, description="Sentinel master name"
    )
    REDIS_SENTINEL_NODES: Annotated[List[str], NoDecode] = Field(
        default_factory=list, description="Sentinel nodes as host:port (comma-separated)"
    )

    # Cluster topology
    REDIS_CLUSTER_ENABLED: bool = Field(
        default=False, description="Connect to a Redis Cluster"
    )
    REDIS_CLUSTER_NODES: Annotated[List[str], NoDecode] = Field(
        default_factory=list, description="Cluster nodes as host:port (comma-separated)"
    )
    REDIS_CLUSTER_MAX_REDIRECTS: int = Field(
        default=5, ge=0, le=50, description="Maximum cluster redirects"
    )

    # Pool sizing - unset values fall back to the pool defaults
    REDIS_POOL_MAX_ACTIVE: Optional[int] = Field(
        default=None, ge=1, le=1000, description="Maximum pooled connections"
    )
    REDIS_POOL_MIN_IDLE: Optional[int] = Field(
        default=None, ge=0, le=1000, description="Minimum idle connections"
    )
    REDIS_POOL_MAX_IDLE: Optional[int] = Field(
        default=None, ge=0, le=1000, description="Maximum idle connections"
    )

    # Socket timeouts
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Connect timeout in seconds"
    )
    REDIS_OPERATION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Socket timeout in seconds"
    )

    REDIS_OTEL_INSTRUMENTATION_ENABLED: bool = Field(
        default=False, description="Enable OpenTelemetry redis-py instrumentation"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("REDIS_SENTINEL_NODES", "REDIS_CLUSTER_NODES", mode="before")
    @classmethod
    def split_nodes(cls, v):
        """Accept comma-separated node lists from the environment."""
        if v is None:
            return []
        if isinstance(v, str):
            return [node.strip() for node in v.split(",") if node.strip()]
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @model_validator(mode="after")
    def validate_topology(self):
        """An enabled topology must carry the settings it needs."""
        if self.REDIS_SENTINEL_ENABLED:
            if not self.REDIS_SENTINEL_MASTER:
                raise ValueError(
                    "REDIS_SENTINEL_MASTER is required when sentinel is enabled"
                )
            if not self.REDIS_SENTINEL_NODES:
                raise ValueError(
                    "REDIS_SENTINEL_NODES is required when sentinel is enabled"
                )
        if self.REDIS_CLUSTER_ENABLED and not self.REDIS_CLUSTER_NODES:
            raise ValueError("REDIS_CLUSTER_NODES is required when cluster is enabled")
        return self

    @property
    def redis_password(self) -> Optional[str]:
        """Plain-text password for the client, or None."""
        if self.REDIS_PASSWORD is None:
            return None
        return self.REDIS_PASSWORD.get_secret_value()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
