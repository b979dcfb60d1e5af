"""Interfaces of the external collaborators."""

from labhub.core.interfaces.snapshot import SnapshotFetcher
from labhub.core.interfaces.store import InstanceStore
from labhub.core.interfaces.transport import EventTransport

__all__ = [
    "EventTransport",
    "InstanceStore",
    "SnapshotFetcher",
]
