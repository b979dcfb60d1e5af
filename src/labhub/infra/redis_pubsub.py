"""Redis PUB/SUB transport for instance change events.

Channel pattern: {instance_prefix}:{tenant_namespace}
Payload: ChangeEvent JSON

PUB/SUB has no durability: a subscriber that drops its connection misses
whatever was published meanwhile, which is why the synchronizer resyncs
after every disconnect.
"""

import logging

import redis.asyncio as redis
from pydantic import ValidationError

from labhub.app.config import get_settings
from labhub.core.errors import TransportDisconnectedError
from labhub.core.interfaces import EventTransport
from labhub.core.logging_schema import Component, LogEvent
from labhub.core.models import ChangeEvent

logger = logging.getLogger(__name__)

_settings = get_settings()
_channel_config = _settings.redis_channel


def get_instance_channel(tenant_namespace: str, prefix: str | None = None) -> str:
    """Get PUB/SUB channel name for a tenant scope."""
    return f"{prefix or _channel_config.instance_prefix}:{tenant_namespace}"


class ChangeEventPublisher:
    """Publishes change events to the viewers of a tenant scope."""

    def __init__(self, client: redis.Redis, prefix: str | None = None) -> None:
        self._client = client
        self._prefix = prefix

    async def publish(self, tenant_namespace: str, event: ChangeEvent) -> int:
        """Publish event to the tenant channel.

        Returns the number of subscribers that received the message.
        """
        channel = get_instance_channel(tenant_namespace, self._prefix)
        count = await self._client.publish(channel, event.model_dump_json())
        logger.debug(
            "Published %s for %s to %s (subscribers=%d)",
            event.update_type,
            event.identity,
            channel,
            count,
            extra={"event": LogEvent.EVENT_PUBLISHED},
        )
        return count


class RedisEventTransport(EventTransport):
    """EventTransport over Redis PUB/SUB."""

    def __init__(self, client: redis.Redis, prefix: str | None = None) -> None:
        self._client = client
        self._prefix = prefix
        self._pubsub: redis.client.PubSub | None = None
        self._channel: str | None = None

    async def subscribe(self, tenant_namespace: str) -> None:
        """Create PubSub connection and subscribe to the tenant channel."""
        self._channel = get_instance_channel(tenant_namespace, self._prefix)
        self._pubsub = self._client.pubsub()
        try:
            await self._pubsub.subscribe(self._channel)
        except redis.ConnectionError as e:
            raise TransportDisconnectedError(f"Subscribe to {self._channel} failed: {e}") from e
        logger.info(
            "Subscribed to %s",
            self._channel,
            extra={"event": LogEvent.TRANSPORT_SUBSCRIBED},
        )

    async def unsubscribe(self) -> None:
        """Unsubscribe and close PubSub connection."""
        if self._pubsub:
            try:
                await self._pubsub.unsubscribe()
                await self._pubsub.aclose()
            except Exception as e:
                logger.warning("Error closing pubsub: %s", e)
            self._pubsub = None
        self._channel = None

    async def get_event(self, timeout: float = 0.0) -> ChangeEvent | None:
        """Read the next change event.

        Undecodable payloads are logged and dropped (returns None).
        """
        if not self._pubsub:
            return None

        try:
            msg = await self._pubsub.get_message(
                ignore_subscribe_messages=True,
                timeout=timeout,
            )
        except redis.ConnectionError as e:
            raise TransportDisconnectedError(f"Lost {self._channel}: {e}") from e

        if not msg or msg["type"] != "message":
            return None

        try:
            event = ChangeEvent.model_validate_json(msg["data"])
        except (ValidationError, UnicodeDecodeError) as e:
            logger.warning(
                "Invalid change event payload",
                extra={
                    "event": LogEvent.EVENT_RECEIVED,
                    "component": Component.TRANSPORT,
                    "channel": self._channel,
                    "error": str(e),
                },
            )
            return None

        logger.debug(
            "Received %s for %s",
            event.update_type,
            event.identity,
            extra={"event": LogEvent.EVENT_RECEIVED},
        )
        return event
