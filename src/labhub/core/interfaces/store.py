"""Persisted instance store interface (reconciliation side)."""

from abc import ABC, abstractmethod

from labhub.core.models import GenericRef, Instance, InstanceIdentity, Template


class InstanceStore(ABC):
    """Persistence layer of the orchestration platform, as seen by the reconciler."""

    @abstractmethod
    async def list_instances(self) -> list[Instance]:
        """List instances to reconcile."""
        ...

    @abstractmethod
    async def get_template(self, ref: GenericRef) -> Template:
        """Get the template an instance refers to.

        Raises:
            TemplateNotFoundError: if the template does not exist
        """
        ...

    @abstractmethod
    async def patch_labels(self, identity: InstanceIdentity, labels: dict[str, str]) -> None:
        """Replace the labels of an instance object."""
        ...
