"""Change event model - one created/modified/deleted notification."""

from pydantic import BaseModel

from labhub.core.domain.instance import UpdateType
from labhub.core.errors import MalformedEventError
from labhub.core.models.instance import Instance, InstanceIdentity


class ChangeEvent(BaseModel):
    """Instance change notification.

    ADDED/MODIFIED events must carry the full snapshot; DELETED events may
    carry the last snapshot or only the identity.
    """

    update_type: UpdateType
    namespace: str
    name: str
    instance: Instance | None = None

    @classmethod
    def from_instance(cls, update_type: UpdateType, instance: Instance) -> "ChangeEvent":
        return cls(
            update_type=update_type,
            namespace=instance.metadata.namespace,
            name=instance.metadata.name,
            instance=instance,
        )

    @property
    def identity(self) -> InstanceIdentity:
        return InstanceIdentity(namespace=self.namespace, name=self.name)

    def snapshot(self) -> Instance | None:
        """The carried instance, or None when absent or for another identity."""
        if self.instance is None or self.instance.identity != self.identity:
            return None
        return self.instance

    def check(self) -> Instance | None:
        """Return the usable snapshot of the event.

        A DELETED event needs none: a missing or mismatching snapshot only
        means there is nothing to describe.

        Raises:
            MalformedEventError: ADDED/MODIFIED event without a usable snapshot
        """
        snapshot = self.snapshot()
        if snapshot is not None or self.update_type == UpdateType.DELETED:
            return snapshot
        if self.instance is None:
            raise MalformedEventError(
                f"{self.update_type} event for {self.identity} has no snapshot"
            )
        raise MalformedEventError(
            f"Snapshot {self.instance.identity} does not match event {self.identity}"
        )
