"""Prometheus metrics definitions for the forge and the synchronizer."""

from prometheus_client import Counter, Histogram

# FAST: CPU computation, label forging, merges (0.5ms ~ 5s)
_BUCKETS_FAST = (
    0.0005, 0.001, 0.002, 0.005, 0.01,
    0.02, 0.05, 0.1, 0.2, 0.5,
    1, 2, 5,
)

# MEDIUM: snapshot fetches, reconcile cycles (5ms ~ 60s)
_BUCKETS_MEDIUM = (
    0.005, 0.01, 0.02, 0.04, 0.09,
    0.18, 0.36, 0.73, 1.5, 3,
    6.2, 12.7, 26, 53,
)

# =============================================================================
# Reconciler Metrics
# =============================================================================

FORGE_RESULTS_TOTAL = Counter(
    "labhub_forge_results_total",
    "Label forge results",
    ["changed"],  # true, false
)

LABEL_PATCHES_TOTAL = Counter(
    "labhub_label_patches_total",
    "Label writes issued by the reconciler",
    ["reason", "status"],  # reason: forge, termination; status: success, error
)

RECONCILE_DURATION = Histogram(
    "labhub_reconcile_duration_seconds",
    "Duration of a full label reconcile tick",
    buckets=_BUCKETS_MEDIUM,
)

# =============================================================================
# Synchronizer Metrics
# =============================================================================

SYNC_EVENTS_TOTAL = Counter(
    "labhub_sync_events_total",
    "Change events processed by viewer sessions",
    ["update_type", "outcome"],  # outcome: applied, noop, malformed, refused
)

SYNC_NOTIFICATIONS_TOTAL = Counter(
    "labhub_sync_notifications_total",
    "User-facing status notifications emitted",
    ["level"],
)

SYNC_RESYNC_TOTAL = Counter(
    "labhub_sync_resync_total",
    "Full resynchronizations",
    ["status"],  # success, error
)

SYNC_MERGE_DURATION = Histogram(
    "labhub_sync_merge_duration_seconds",
    "Duration of a single event merge",
    buckets=_BUCKETS_FAST,
)

SNAPSHOT_FETCH_DURATION = Histogram(
    "labhub_snapshot_fetch_duration_seconds",
    "Duration of authoritative snapshot fetches",
    buckets=_BUCKETS_MEDIUM,
)
