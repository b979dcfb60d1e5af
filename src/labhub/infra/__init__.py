"""Adapters for the external collaborators (Redis PUB/SUB, snapshot API)."""

from labhub.infra.redis_pubsub import ChangeEventPublisher, RedisEventTransport
from labhub.infra.snapshot import HttpSnapshotFetcher, SnapshotClientConfig

__all__ = [
    "ChangeEventPublisher",
    "HttpSnapshotFetcher",
    "RedisEventTransport",
    "SnapshotClientConfig",
]
