"""Error handling module for lab-hub.

Nothing raised here is fatal to the process: every error is caught at the
component boundary and turned into a flag, a skipped event or a resync.

Usage:
    from labhub.core.errors import SnapshotFetchError

    # Raise with default message
    raise SnapshotFetchError()

    # Raise with custom message
    raise SnapshotFetchError("Snapshot endpoint returned 503")
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes."""

    MALFORMED_EVENT = "MALFORMED_EVENT"
    SNAPSHOT_FETCH_FAILED = "SNAPSHOT_FETCH_FAILED"
    TRANSPORT_DISCONNECTED = "TRANSPORT_DISCONNECTED"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"


class LabHubError(Exception):
    """Base exception for lab-hub.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class MalformedEventError(LabHubError):
    """Change event cannot be applied (missing or mismatching snapshot)."""

    def __init__(self, message: str = "Malformed change event") -> None:
        super().__init__(ErrorCode.MALFORMED_EVENT, message)


class SnapshotFetchError(LabHubError):
    """Authoritative snapshot could not be fetched."""

    def __init__(self, message: str = "Failed to fetch instance snapshot") -> None:
        super().__init__(ErrorCode.SNAPSHOT_FETCH_FAILED, message)


class TransportDisconnectedError(LabHubError):
    """Change event stream broke; the replica must be resynchronized."""

    def __init__(self, message: str = "Change event transport disconnected") -> None:
        super().__init__(ErrorCode.TRANSPORT_DISCONNECTED, message)


class TemplateNotFoundError(LabHubError):
    """Template referenced by an instance does not exist."""

    def __init__(self, message: str = "Template not found") -> None:
        super().__init__(ErrorCode.TEMPLATE_NOT_FOUND, message)
