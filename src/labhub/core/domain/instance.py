"""Instance domain enums.

Phase values mirror the status.phase strings written by the instance
operator; UpdateType mirrors the kind carried by change notifications.
"""

from enum import StrEnum


class Phase(StrEnum):
    """Instance lifecycle phase (status.phase)."""

    UNKNOWN = ""
    IMPORTING = "Importing"
    STARTING = "Starting"
    RESOURCE_QUOTA_EXCEEDED = "ResourceQuotaExceeded"
    RUNNING = "Running"
    READY = "Ready"
    STOPPING = "Stopping"
    OFF = "Off"
    FAILED = "Failed"
    CREATION_LOOP_BACKOFF = "CreationLoopBackoff"

    @classmethod
    def parse(cls, value: object) -> "Phase":
        """Coerce a wire value, mapping anything unrecognised to UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value or "")
        except ValueError:
            return cls.UNKNOWN


class UpdateType(StrEnum):
    """Change event kind."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


class WorkspaceRole(StrEnum):
    """Role of the viewer inside the workspace being displayed."""

    USER = "user"
    MANAGER = "manager"
