"""Authoritative snapshot fetch interface."""

from abc import ABC, abstractmethod

from labhub.core.models import Instance


class SnapshotFetcher(ABC):
    """Request/response source of the full set of visible instances.

    Implementations: HttpSnapshotFetcher
    """

    @abstractmethod
    async def fetch(self, tenant_namespace: str) -> list[Instance]:
        """Fetch every instance visible in a tenant scope.

        Args:
            tenant_namespace: Viewer scope

        Returns:
            Current instances, in server order

        Raises:
            SnapshotFetchError: if the snapshot cannot be obtained
        """
        ...
