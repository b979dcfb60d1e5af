"""Fixtures for synchronizer unit tests."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from labhub.core.interfaces import EventTransport, SnapshotFetcher
from labhub.core.models import ChangeEvent


class FakeTransport(EventTransport):
    """In-memory EventTransport.

    Items are ChangeEvents or exceptions; an exception item is raised from
    get_event() to simulate a broken stream.
    """

    def __init__(self) -> None:
        self.items: asyncio.Queue[ChangeEvent | Exception] = asyncio.Queue()
        self.subscriptions: list[str] = []
        self.unsubscribe_count = 0

    async def subscribe(self, tenant_namespace: str) -> None:
        self.subscriptions.append(tenant_namespace)

    async def unsubscribe(self) -> None:
        self.unsubscribe_count += 1

    async def get_event(self, timeout: float = 0.0) -> ChangeEvent | None:
        try:
            item = await asyncio.wait_for(self.items.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def mock_fetcher() -> AsyncMock:
    """SnapshotFetcher mock returning an empty snapshot."""
    fetcher = AsyncMock(spec=SnapshotFetcher)
    fetcher.fetch = AsyncMock(return_value=[])
    return fetcher


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
