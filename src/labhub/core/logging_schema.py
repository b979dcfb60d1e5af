"""Logging field schema - v1.0

Standard fields (added to all logs):
- schema_version: Log schema version
- service: Service name (labhub)
- component: Component name (RECONCILER, SYNC, TRANSPORT)
- event: Event type (reconcile_complete, event_applied, etc.)
- trace_id: Trace ID (per reconcile tick / viewer session)

High cardinality fields (OK in logs, NOT in metric labels):
- instance: namespace/name of the instance
- tenant_namespace: Viewer scope
"""

from enum import StrEnum


class LogEvent(StrEnum):
    """Standard log event types."""

    # Reconciler events
    RECONCILE_COMPLETE = "reconcile_complete"
    RECONCILE_SLOW = "reconcile_slow"
    LABELS_UPDATED = "labels_updated"
    TERMINATION_RECORDED = "termination_recorded"
    OPERATION_FAILED = "operation_failed"

    # Synchronizer events
    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"
    EVENT_APPLIED = "event_applied"
    EVENT_SKIPPED = "event_skipped"
    RESYNC_STARTED = "resync_started"
    RESYNC_COMPLETE = "resync_complete"
    RESYNC_FAILED = "resync_failed"
    CALLBACK_FAILED = "callback_failed"

    # Transport events
    TRANSPORT_SUBSCRIBED = "transport_subscribed"
    TRANSPORT_DISCONNECTED = "transport_disconnected"
    EVENT_PUBLISHED = "event_published"
    EVENT_RECEIVED = "event_received"

    # Snapshot fetch events
    SNAPSHOT_FETCHED = "snapshot_fetched"


class Component(StrEnum):
    """Component identifiers for log filtering."""

    RECONCILER = "reconciler"
    SYNC = "sync"
    TRANSPORT = "transport"
