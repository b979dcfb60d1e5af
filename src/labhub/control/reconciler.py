"""InstanceLabelReconciler - instance label 수렴.

Reconcile Loop:
1. Load: list instances from the store
2. Forge: instance_labels() (pure, no I/O)
3. Persist: patch_labels() only when the forge reports a change

Writing only on change makes the loop settle: a second pass over its own
output forges identical labels and issues no write.
"""

import logging
import time
from collections.abc import Mapping
from uuid import uuid4

from labhub.app.config import get_settings
from labhub.app.logging import clear_trace_context, set_trace_id
from labhub.app.metrics.collector import (
    FORGE_RESULTS_TOTAL,
    LABEL_PATCHES_TOTAL,
    RECONCILE_DURATION,
)
from labhub.control.forge import (
    bool_label,
    instance_automation_labels_on_termination,
    instance_labels,
    match_labels,
)
from labhub.core.interfaces import InstanceStore
from labhub.core.logging_schema import Component, LogEvent
from labhub.core.models import GenericRef, Instance, Template
from labhub.core.retryable import classify_error

logger = logging.getLogger(__name__)

_settings = get_settings()
_logging_config = _settings.logging


class InstanceLabelReconciler:
    """Keeps instance labels aligned with their template and customization."""

    def __init__(self, store: InstanceStore) -> None:
        self._store = store

    async def reconcile_instance(
        self,
        instance: Instance,
        template: Template | None = None,
    ) -> bool:
        """Forge and persist the labels of one instance.

        Args:
            instance: Observed instance
            template: Its template, fetched from the store when omitted

        Returns:
            True if labels were written
        """
        if template is None:
            template = await self._store.get_template(instance.spec.template)

        labels, changed = instance_labels(
            instance.metadata.labels,
            template,
            instance.spec.customization_urls,
        )
        FORGE_RESULTS_TOTAL.labels(changed=bool_label(changed)).inc()
        if not changed:
            return False

        await self._patch(instance, labels, reason="forge")
        logger.info(
            "Labels updated",
            extra={
                "event": LogEvent.LABELS_UPDATED,
                "component": Component.RECONCILER,
                "instance": str(instance.identity),
            },
        )
        return True

    async def record_submitter_termination(self, instance: Instance) -> bool:
        """Disable automatic termination of an instance its submitter terminated.

        Returns:
            True if labels were written
        """
        current = dict(instance.metadata.labels or {})
        labels = instance_automation_labels_on_termination(current)
        if labels == current:
            return False

        await self._patch(instance, labels, reason="termination")
        logger.info(
            "Submitter termination recorded",
            extra={
                "event": LogEvent.TERMINATION_RECORDED,
                "component": Component.RECONCILER,
                "instance": str(instance.identity),
            },
        )
        return True

    async def tick(self, selector: Mapping[str, str] | None = None) -> int:
        """Reconcile every instance once.

        A failing instance is logged and skipped; the rest of the tick
        proceeds.

        Args:
            selector: Only reconcile instances whose labels match it

        Returns:
            Number of instances whose labels were written
        """
        tick_id = str(uuid4())[:8]
        set_trace_id(tick_id)

        try:
            tick_start = time.monotonic()
            instances = await self._store.list_instances()
            if selector:
                instances = [i for i in instances if match_labels(i.metadata.labels, selector)]
            if not instances:
                return 0

            templates: dict[tuple[str, str], Template] = {}
            updated = 0
            failed = 0
            for instance in instances:
                try:
                    template = await self._get_template(instance.spec.template, templates)
                    if await self.reconcile_instance(instance, template):
                        updated += 1
                except Exception as exc:
                    failed += 1
                    logger.exception(
                        "Failed to reconcile labels",
                        extra={
                            "event": LogEvent.OPERATION_FAILED,
                            "component": Component.RECONCILER,
                            "instance": str(instance.identity),
                            "error_class": classify_error(exc),
                        },
                    )

            duration = time.monotonic() - tick_start
            duration_ms = duration * 1000
            RECONCILE_DURATION.observe(duration)
            logger.info(
                "Reconcile completed",
                extra={
                    "event": LogEvent.RECONCILE_COMPLETE,
                    "tick_id": tick_id,
                    "processed": len(instances),
                    "changed": updated,
                    "failed": failed,
                    "duration_ms": duration_ms,
                },
            )

            if duration_ms > _logging_config.slow_threshold_ms:
                logger.warning(
                    "Slow reconcile detected",
                    extra={
                        "event": LogEvent.RECONCILE_SLOW,
                        "tick_id": tick_id,
                        "duration_ms": duration_ms,
                        "threshold_ms": _logging_config.slow_threshold_ms,
                        "processed": len(instances),
                    },
                )
            return updated
        finally:
            clear_trace_context()

    async def _get_template(
        self,
        ref: GenericRef,
        cache: dict[tuple[str, str], Template],
    ) -> Template:
        """Tick-scoped template lookup (instances often share a template)."""
        key = (ref.namespace, ref.name)
        if key not in cache:
            cache[key] = await self._store.get_template(ref)
        return cache[key]

    async def _patch(self, instance: Instance, labels: dict[str, str], reason: str) -> None:
        try:
            await self._store.patch_labels(instance.identity, labels)
        except Exception:
            LABEL_PATCHES_TOTAL.labels(reason=reason, status="error").inc()
            raise
        LABEL_PATCHES_TOTAL.labels(reason=reason, status="success").inc()
