"""Domain enums."""

from labhub.core.domain.instance import (
    Phase,
    UpdateType,
    WorkspaceRole,
)

__all__ = [
    "Phase",
    "UpdateType",
    "WorkspaceRole",
]
