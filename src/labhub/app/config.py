"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str = Field(default="redis://redis:6379")


class RedisChannelConfig(BaseSettings):
    """Redis PUB/SUB channel naming configuration.

    Channel naming pattern: {prefix}:{tenant_namespace}
    - Instance change events: labhub:instances:tenant-tester
    """

    model_config = SettingsConfigDict(env_prefix="REDIS_CHANNEL_")

    instance_prefix: str = Field(default="labhub:instances")


class SnapshotConfig(BaseSettings):
    """Authoritative snapshot endpoint configuration."""

    model_config = SettingsConfigDict(env_prefix="SNAPSHOT_")

    endpoint: str = Field(default="http://labhub-api:8080")
    api_key: str = Field(default="")
    timeout: float = Field(default=10.0)  # seconds
    max_retries: int = Field(default=3)
    base_delay: float = Field(default=0.5)  # seconds (first retry backoff)


class SyncConfig(BaseSettings):
    """Viewer session (State Synchronizer) configuration."""

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    queue_maxsize: int = Field(default=1000)  # pending events per session
    get_timeout: float = Field(default=1.0)  # seconds (transport poll)
    reconnect_delay: float = Field(default=2.0)  # seconds


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Rate limiting:
    - Prevents log storms from repeated messages
    - ERROR logs bypass rate limiting (always logged)
    """

    model_config = SettingsConfigDict(env_prefix="LOGGING_")

    level: str = Field(default="INFO")
    schema_version: str = Field(default="1.0")
    slow_threshold_ms: float = Field(default=1000.0)
    rate_limit_per_minute: int = Field(default=100)
    service_name: str = Field(default="labhub")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LABHUB_",
        env_nested_delimiter="__",
    )

    redis: RedisConfig = Field(default_factory=RedisConfig)
    redis_channel: RedisChannelConfig = Field(default_factory=RedisChannelConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    return Settings()
