"""HTTP client for the authoritative instance snapshot.

GET {endpoint}/api/v1/tenants/{namespace}/instances → {"instances": [...]}
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx
from pydantic import TypeAdapter, ValidationError

from labhub.app.config import SnapshotConfig, get_settings
from labhub.app.metrics.collector import SNAPSHOT_FETCH_DURATION
from labhub.core.errors import SnapshotFetchError
from labhub.core.interfaces import SnapshotFetcher
from labhub.core.logging_schema import LogEvent
from labhub.core.models import Instance
from labhub.core.retryable import with_retry

logger = logging.getLogger(__name__)

_instance_list = TypeAdapter(list[Instance])


@dataclass
class SnapshotClientConfig:
    """Snapshot API connection configuration."""

    endpoint: str
    api_key: str = ""
    timeout: float = 10.0
    max_retries: int = 3
    base_delay: float = 0.5

    @classmethod
    def from_settings(cls, settings: SnapshotConfig | None = None) -> SnapshotClientConfig:
        cfg = settings or get_settings().snapshot
        return cls(
            endpoint=cfg.endpoint,
            api_key=cfg.api_key,
            timeout=cfg.timeout,
            max_retries=cfg.max_retries,
            base_delay=cfg.base_delay,
        )


class HttpSnapshotFetcher(SnapshotFetcher):
    """SnapshotFetcher over the lab-hub HTTP API."""

    def __init__(
        self,
        config: SnapshotClientConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.endpoint,
                headers=self._get_headers(),
                timeout=self._config.timeout,
            )
        return self._client

    async def _fetch_once(self, tenant_namespace: str) -> list[Instance]:
        client = await self._get_client()
        resp = await client.get(f"/api/v1/tenants/{tenant_namespace}/instances")
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected snapshot payload type: {type(payload).__name__}")
        return _instance_list.validate_python(payload.get("instances", []))

    async def fetch(self, tenant_namespace: str) -> list[Instance]:
        """Fetch all instances of a tenant scope, retrying transient errors."""
        start = time.monotonic()
        try:
            instances = await with_retry(
                lambda: self._fetch_once(tenant_namespace),
                max_retries=self._config.max_retries,
                base_delay=self._config.base_delay,
            )
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise SnapshotFetchError(f"Snapshot of {tenant_namespace} failed: {e}") from e
        finally:
            SNAPSHOT_FETCH_DURATION.observe(time.monotonic() - start)

        logger.info(
            "Snapshot fetched",
            extra={
                "event": LogEvent.SNAPSHOT_FETCHED,
                "tenant_namespace": tenant_namespace,
                "count": len(instances),
            },
        )
        return instances

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
