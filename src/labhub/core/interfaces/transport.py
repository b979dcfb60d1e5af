"""Change event transport interface."""

from abc import ABC, abstractmethod

from labhub.core.models import ChangeEvent


class EventTransport(ABC):
    """Push-based delivery of change events for one viewer scope.

    Delivery is at-least-once and causally ordered per instance identity.
    Nothing is guaranteed across a disconnect: callers resynchronize.

    Implementations: RedisEventTransport
    """

    @abstractmethod
    async def subscribe(self, tenant_namespace: str) -> None:
        """Start receiving events for a tenant scope."""
        ...

    @abstractmethod
    async def unsubscribe(self) -> None:
        """Stop receiving events and release the connection."""
        ...

    @abstractmethod
    async def get_event(self, timeout: float = 0.0) -> ChangeEvent | None:
        """Wait up to timeout seconds for the next event.

        Returns:
            The next event, or None if nothing arrived in time

        Raises:
            TransportDisconnectedError: if the stream broke
        """
        ...
