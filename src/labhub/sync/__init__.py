"""Client-side instance replica driven by change events."""

from labhub.sync.merge import InstanceRecord, MergeResult, merge_event, records_from_snapshot
from labhub.sync.notifier import (
    NotificationLevel,
    StatusMessage,
    ViewerScope,
    notify_status,
)
from labhub.sync.synchronizer import InstanceSynchronizer

__all__ = [
    "InstanceRecord",
    "InstanceSynchronizer",
    "MergeResult",
    "NotificationLevel",
    "StatusMessage",
    "ViewerScope",
    "merge_event",
    "notify_status",
    "records_from_snapshot",
]
