"""InstanceSynchronizer - one viewer session's replica of visible instances.

Architecture:
- reader task: transport.get_event() → asyncio.Queue (no merging here)
- consumer: queue → apply() one event at a time (single owner of the replica)

Uses asyncio.Queue to decouple event delivery from application, so the
replica and the notification side effect are only ever touched by the
consumer.

After a transport disconnect the event stream gives no resumption point:
incremental application is refused until resync() has replaced the
replica with a fresh authoritative snapshot.

Configuration via SyncConfig (SYNC_ env prefix).
"""

import asyncio
import logging
import time
from collections.abc import Callable

from labhub.app.config import get_settings
from labhub.app.logging import clear_trace_context, set_tenant_namespace, set_trace_id
from labhub.app.metrics.collector import (
    SYNC_EVENTS_TOTAL,
    SYNC_MERGE_DURATION,
    SYNC_NOTIFICATIONS_TOTAL,
    SYNC_RESYNC_TOTAL,
)
from labhub.core.errors import SnapshotFetchError, TransportDisconnectedError
from labhub.core.interfaces import EventTransport, SnapshotFetcher
from labhub.core.logging_schema import Component, LogEvent
from labhub.core.models import ChangeEvent
from labhub.sync.merge import InstanceRecord, merge_event, records_from_snapshot
from labhub.sync.notifier import StatusMessage, ViewerScope, notify_status

logger = logging.getLogger(__name__)

_settings = get_settings()
_sync_config = _settings.sync

NotifyCallback = Callable[[StatusMessage], None]
ChangeCallback = Callable[[tuple[InstanceRecord, ...]], None]


class InstanceSynchronizer:
    """Replica of the instances visible in one viewer scope.

    Sessions share nothing: create one synchronizer per viewer.
    """

    def __init__(
        self,
        scope: ViewerScope,
        fetcher: SnapshotFetcher,
        on_notify: NotifyCallback | None = None,
        on_change: ChangeCallback | None = None,
        *,
        queue_maxsize: int | None = None,
        get_timeout: float | None = None,
        reconnect_delay: float | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            scope: Viewer scope (tenant namespace + role) used for fetches,
                   subscriptions and notifications.
            fetcher: Authoritative snapshot source.
            on_notify: Receives one StatusMessage per notified event.
            on_change: Receives the full record tuple after every change.
        """
        self._scope = scope
        self._fetcher = fetcher
        self._on_notify = on_notify
        self._on_change = on_change
        self._get_timeout = get_timeout if get_timeout is not None else _sync_config.get_timeout
        self._reconnect_delay = (
            reconnect_delay if reconnect_delay is not None else _sync_config.reconnect_delay
        )

        self._records: tuple[InstanceRecord, ...] = ()
        # Nothing fetched yet: the first snapshot is the initial population
        self._needs_resync = True
        self._degraded = False
        self._running = False

        maxsize = queue_maxsize if queue_maxsize is not None else _sync_config.queue_maxsize
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)

    @property
    def scope(self) -> ViewerScope:
        return self._scope

    @property
    def records(self) -> tuple[InstanceRecord, ...]:
        return self._records

    @property
    def needs_resync(self) -> bool:
        return self._needs_resync

    @property
    def degraded(self) -> bool:
        """Transport is down or the last resync failed."""
        return self._degraded

    @property
    def running(self) -> bool:
        return self._running

    # =========================================================================
    # Replica mutation
    # =========================================================================

    async def resync(self) -> None:
        """Replace the replica with a fresh authoritative snapshot.

        The previous replica is never merged with the snapshot: it is
        replaced as a whole once the fetch succeeds.

        Raises:
            SnapshotFetchError: the replica keeps needing a resync
        """
        self._needs_resync = True
        tenant_namespace = self._scope.tenant_namespace
        logger.info(
            "Resync started",
            extra={"event": LogEvent.RESYNC_STARTED, "tenant_namespace": tenant_namespace},
        )

        try:
            instances = await self._fetcher.fetch(tenant_namespace)
        except SnapshotFetchError as exc:
            SYNC_RESYNC_TOTAL.labels(status="error").inc()
            self._degraded = True
            logger.warning(
                "Resync failed",
                extra={
                    "event": LogEvent.RESYNC_FAILED,
                    "tenant_namespace": tenant_namespace,
                    "error_code": exc.code.value,
                    "error": exc.message,
                },
            )
            raise

        self._records = tuple(records_from_snapshot(instances))
        self._needs_resync = False
        self._degraded = False
        SYNC_RESYNC_TOTAL.labels(status="success").inc()
        logger.info(
            "Resync completed",
            extra={
                "event": LogEvent.RESYNC_COMPLETE,
                "tenant_namespace": tenant_namespace,
                "count": len(self._records),
            },
        )
        self._emit_change()

    def apply(self, event: ChangeEvent) -> bool:
        """Apply one change event.

        Returns:
            True if the replica changed. Malformed events, duplicates and
            events received while a resync is pending return False.
        """
        update_type = event.update_type.value

        if self._needs_resync:
            SYNC_EVENTS_TOTAL.labels(update_type=update_type, outcome="refused").inc()
            logger.debug(
                "Event refused, resync pending",
                extra={"event": LogEvent.EVENT_SKIPPED, "instance": str(event.identity)},
            )
            return False

        start = time.monotonic()
        result = merge_event(self._records, event)
        SYNC_MERGE_DURATION.observe(time.monotonic() - start)

        if result.malformed:
            SYNC_EVENTS_TOTAL.labels(update_type=update_type, outcome="malformed").inc()
            logger.warning(
                "Malformed event skipped",
                extra={
                    "event": LogEvent.EVENT_SKIPPED,
                    "component": Component.SYNC,
                    "instance": str(event.identity),
                    "update_type": update_type,
                    "error": result.error,
                },
            )
            return False

        self._records = tuple(result.records)
        SYNC_EVENTS_TOTAL.labels(
            update_type=update_type,
            outcome="applied" if result.changed else "noop",
        ).inc()
        logger.debug(
            "Event applied",
            extra={
                "event": LogEvent.EVENT_APPLIED,
                "instance": str(event.identity),
                "update_type": update_type,
                "changed": result.changed,
            },
        )

        if result.changed:
            self._emit_change()
        snapshot = event.snapshot()
        if result.notify and snapshot is not None:
            message = notify_status(snapshot.phase, snapshot, event.update_type, self._scope)
            self._emit_notify(message)

        return result.changed

    def _emit_change(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._records)
        except Exception as e:
            logger.exception(
                "on_change callback failed: %s",
                e,
                extra={"event": LogEvent.CALLBACK_FAILED},
            )

    def _emit_notify(self, message: StatusMessage) -> None:
        SYNC_NOTIFICATIONS_TOTAL.labels(level=message.level.value).inc()
        if self._on_notify is None:
            return
        try:
            self._on_notify(message)
        except Exception as e:
            logger.exception(
                "on_notify callback failed: %s",
                e,
                extra={"event": LogEvent.CALLBACK_FAILED},
            )

    # =========================================================================
    # Session loop
    # =========================================================================

    async def run(self, transport: EventTransport) -> None:
        """Consume the transport until stop() is called or cancelled.

        Each connection cycle: subscribe → resync → apply events. Subscribing
        before the snapshot fetch means no event published during the fetch
        is lost; replaying it afterwards is harmless.
        """
        self._running = True
        tenant_namespace = self._scope.tenant_namespace
        set_trace_id()
        set_tenant_namespace(tenant_namespace)
        logger.info(
            "Session started",
            extra={"event": LogEvent.SESSION_STARTED, "tenant_namespace": tenant_namespace},
        )

        try:
            while self._running:
                try:
                    await transport.subscribe(tenant_namespace)
                    if not await self._resync_until_ready():
                        break
                    await self._pump(transport)
                except TransportDisconnectedError as exc:
                    self._mark_disconnected(exc)
                    await self._safe_unsubscribe(transport)
                    await asyncio.sleep(self._reconnect_delay)
                except Exception as e:
                    logger.exception("Session error: %s", e)
                    self._mark_disconnected(e)
                    await self._safe_unsubscribe(transport)
                    await asyncio.sleep(self._reconnect_delay)
        except asyncio.CancelledError:
            logger.info(
                "Cancelled, cleaning up",
                extra={"event": LogEvent.SESSION_STOPPED},
            )
            raise
        finally:
            self._running = False
            await self._safe_unsubscribe(transport)
            logger.info(
                "Session stopped",
                extra={"event": LogEvent.SESSION_STOPPED, "tenant_namespace": tenant_namespace},
            )
            clear_trace_context()

    def stop(self) -> None:
        """Stop the session loop."""
        self._running = False

    async def _resync_until_ready(self) -> bool:
        """Retry resync until it succeeds. Returns False if stopped meanwhile."""
        while self._running:
            try:
                await self.resync()
                return True
            except SnapshotFetchError:
                await asyncio.sleep(self._reconnect_delay)
        return False

    async def _pump(self, transport: EventTransport) -> None:
        """Apply queued events until stopped or the reader fails."""
        reader = asyncio.create_task(self._read_loop(transport))
        try:
            while self._running:
                if reader.done():
                    # Re-raises TransportDisconnectedError from the reader
                    reader.result()
                    return
                try:
                    event = await asyncio.wait_for(self._queue.get(), timeout=self._get_timeout)
                except asyncio.TimeoutError:
                    continue
                self.apply(event)
                self._queue.task_done()
        finally:
            if not reader.done():
                reader.cancel()
                try:
                    await reader
                except asyncio.CancelledError:
                    pass

    async def _read_loop(self, transport: EventTransport) -> None:
        """Transport → queue. Only enqueues, never merges."""
        while self._running:
            event = await transport.get_event(timeout=self._get_timeout)
            if event is not None:
                await self._queue.put(event)

    def _mark_disconnected(self, exc: Exception) -> None:
        """Drop pending events and require a full resync."""
        self._needs_resync = True
        self._degraded = True
        dropped = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            dropped += 1
        logger.warning(
            "Transport disconnected, resync required",
            extra={
                "event": LogEvent.TRANSPORT_DISCONNECTED,
                "component": Component.TRANSPORT,
                "tenant_namespace": self._scope.tenant_namespace,
                "dropped": dropped,
                "error": str(exc),
            },
        )

    async def _safe_unsubscribe(self, transport: EventTransport) -> None:
        try:
            await transport.unsubscribe()
        except Exception as e:
            logger.warning(
                "Error unsubscribing",
                extra={"event": LogEvent.TRANSPORT_DISCONNECTED, "error": str(e)},
            )
