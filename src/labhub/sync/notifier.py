"""Change notifier - applied event → user-facing status message.

Stateless: the viewer scope is passed explicitly and nothing here touches
the replica.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from labhub.core.domain.instance import Phase, UpdateType, WorkspaceRole
from labhub.core.models import Instance


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ViewerScope(BaseModel):
    """Who is looking: the tenant namespace of the session and the viewer role."""

    tenant_namespace: str
    role: WorkspaceRole = WorkspaceRole.USER

    model_config = ConfigDict(frozen=True)


class StatusMessage(BaseModel):
    level: NotificationLevel
    title: str
    description: str
    namespace: str
    name: str

    model_config = ConfigDict(frozen=True)


# phase → (level, title, description template)
_PHASE_MESSAGES: dict[Phase, tuple[NotificationLevel, str, str]] = {
    Phase.IMPORTING: (NotificationLevel.INFO, "Instance importing", "{name} is importing its image"),
    Phase.STARTING: (NotificationLevel.INFO, "Instance starting", "{name} is starting"),
    Phase.RUNNING: (NotificationLevel.INFO, "Instance running", "{name} is running, waiting to be ready"),
    Phase.READY: (NotificationLevel.SUCCESS, "Instance ready", "{name} is up and ready to use"),
    Phase.STOPPING: (NotificationLevel.INFO, "Instance stopping", "{name} is stopping"),
    Phase.OFF: (NotificationLevel.WARNING, "Instance stopped", "{name} has been stopped"),
    Phase.FAILED: (NotificationLevel.ERROR, "Instance failed", "{name} failed to start"),
    Phase.CREATION_LOOP_BACKOFF: (
        NotificationLevel.ERROR,
        "Instance failed",
        "{name} keeps failing to start",
    ),
    Phase.RESOURCE_QUOTA_EXCEEDED: (
        NotificationLevel.WARNING,
        "Resource quota exceeded",
        "{name} cannot start: resource quota exceeded",
    ),
}

_GENERIC_MESSAGE = (NotificationLevel.INFO, "Instance updated", "{name} status changed")
_CREATED_MESSAGE = (NotificationLevel.INFO, "Instance created", "{name} has been created")
_DELETED_MESSAGE = (NotificationLevel.INFO, "Instance deleted", "{name} has been deleted")

# Phases reported as plain creation when seen on an ADDED event
_CREATION_PHASES = frozenset({Phase.UNKNOWN, Phase.IMPORTING, Phase.STARTING})


def notify_status(
    phase: Phase | str | None,
    instance: Instance,
    update_type: UpdateType,
    scope: ViewerScope,
) -> StatusMessage:
    """Build the status message for an applied event.

    Defined for every update type; unknown phases map to a generic
    informational message.
    """
    phase = Phase.parse(phase)

    match update_type:
        case UpdateType.DELETED:
            level, title, template = _DELETED_MESSAGE
        case UpdateType.ADDED if phase in _CREATION_PHASES:
            level, title, template = _CREATED_MESSAGE
        case _:
            level, title, template = _PHASE_MESSAGES.get(phase, _GENERIC_MESSAGE)

    description = template.format(name=instance.display_name)
    if _is_foreign(instance, scope):
        description = f"{description} (tenant {instance.spec.tenant.name})"

    return StatusMessage(
        level=level,
        title=title,
        description=description,
        namespace=instance.metadata.namespace,
        name=instance.metadata.name,
    )


def _is_foreign(instance: Instance, scope: ViewerScope) -> bool:
    """Manager looking at an instance outside its own tenant namespace."""
    return (
        scope.role == WorkspaceRole.MANAGER
        and instance.metadata.namespace != scope.tenant_namespace
    )
