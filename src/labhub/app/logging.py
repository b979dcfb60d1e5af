"""JSON logging for lab-hub.

Two context variables are bound by the long-running loops and stamped on
every record emitted inside them:

- trace_id: reconcile tick id, or the viewer session id
- tenant_namespace: viewer scope of the current synchronizer session

Fields passed through ``extra=`` take precedence over the bound context.
"""

import logging
import sys
import time
from collections import defaultdict
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

from labhub.app.config import get_settings

trace_id_ctx: ContextVar[str | None] = ContextVar("trace_id", default=None)
tenant_ctx: ContextVar[str | None] = ContextVar("tenant_namespace", default=None)


def get_trace_id() -> str | None:
    return trace_id_ctx.get()


def set_trace_id(trace_id: str | None = None) -> str:
    """Bind a trace id (generated when omitted) and return it."""
    tid = trace_id or str(uuid4())
    trace_id_ctx.set(tid)
    return tid


def get_tenant_namespace() -> str | None:
    return tenant_ctx.get()


def set_tenant_namespace(tenant_namespace: str | None) -> None:
    tenant_ctx.set(tenant_namespace)


def clear_trace_context() -> None:
    """Unbind every context field (end of a tick or session)."""
    trace_id_ctx.set(None)
    tenant_ctx.set(None)


def bound_context() -> dict[str, str]:
    """Context fields currently bound, unset ones omitted."""
    fields = {
        "trace_id": trace_id_ctx.get(),
        "tenant_namespace": tenant_ctx.get(),
    }
    return {key: value for key, value in fields.items() if value}


class RateLimitFilter(logging.Filter):
    """Caps identical messages (same logger, line and format string) per minute.

    A synchronizer fed a burst of duplicate or malformed events would
    otherwise log one line per event. The first suppressed record passes
    with a "[RATE LIMITED]" marker; ERROR and above are never limited.
    """

    def __init__(self, rate_per_minute: int = 100) -> None:
        super().__init__()
        self.rate_per_minute = rate_per_minute
        self._seen: dict[str, list[float]] = defaultdict(list)
        self._suppressing: set[str] = set()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return True

        key = f"{record.name}:{record.lineno}:{record.msg}"
        now = time.time()
        window = [t for t in self._seen[key] if now - t < 60]
        self._seen[key] = window

        if len(window) < self.rate_per_minute:
            if len(window) < self.rate_per_minute // 2:
                self._suppressing.discard(key)
            window.append(now)
            return True

        if key in self._suppressing:
            return False

        self._suppressing.add(key)
        record.msg = f"[RATE LIMITED] {record.msg} (max {self.rate_per_minute}/min)"
        window.append(now)
        return True


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter adding service metadata and the bound context.

    Standard fields: timestamp (ISO 8601, UTC), level, logger, pid,
    schema_version, service, plus trace_id / tenant_namespace when bound.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        logging_config = get_settings().logging
        self._static = {
            "schema_version": logging_config.schema_version,
            "service": logging_config.service_name,
        }

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["pid"] = record.process
        log_record.update(self._static)

        for key, value in bound_context().items():
            log_record.setdefault(key, value)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging(level: int | None = None) -> None:
    """Install the JSON handler on the root logger.

    Called once by the hosting process before starting reconcilers or
    viewer sessions.

    Args:
        level: Log level. If None, uses LOGGING_LEVEL from settings.
    """
    logging_config = get_settings().logging

    if level is None:
        level = getattr(logging, logging_config.level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter())
    handler.addFilter(RateLimitFilter(logging_config.rate_limit_per_minute))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Snapshot fetches log every request at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
