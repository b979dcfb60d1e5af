"""Retryable error classification with exponential backoff retry.

Classifies errors as retryable (transient) or non-retryable (permanent).
Used by the snapshot fetcher to decide whether to retry a request.

Usage:
    from labhub.core.retryable import with_retry

    result = await with_retry(lambda: client.get("/api/v1/..."))
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


HTTPX_RETRYABLE = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
    httpx.RemoteProtocolError,
)

HTTPX_NON_RETRYABLE = (
    httpx.InvalidURL,
    httpx.TooManyRedirects,
)


def is_httpx_retryable(exc: Exception) -> bool:
    """Check if httpx exception is retryable."""
    if isinstance(exc, HTTPX_RETRYABLE):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        # 429 Rate limit - retryable
        if status == 429:
            return True
        if 400 <= status < 500:
            return False
        if status >= 500:
            return True
    return False


def is_retryable(exc: Exception) -> bool:
    """Check if error is retryable (transient)."""
    return classify_error(exc) == "retryable"


def classify_error(exc: Exception) -> str:
    """Classify error as 'retryable', 'permanent', or 'unknown'."""
    if isinstance(exc, asyncio.TimeoutError):
        return "retryable"

    if isinstance(exc, httpx.HTTPStatusError):
        return "retryable" if is_httpx_retryable(exc) else "permanent"
    if isinstance(exc, HTTPX_RETRYABLE):
        return "retryable"
    if isinstance(exc, HTTPX_NON_RETRYABLE):
        return "permanent"

    # Payload that does not parse will not parse on retry either
    if isinstance(exc, ValueError):
        return "permanent"

    return "unknown"


async def with_retry(
    coro_factory: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
) -> T:
    """Execute async operation with exponential backoff retry.

    Only permanent errors are raised immediately; retryable and unknown
    errors are retried up to max_retries times.

    Args:
        coro_factory: Factory function that creates new coroutine for each attempt
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 30.0)

    Returns:
        Result of successful operation

    Raises:
        Exception: The last exception if all retries fail, or immediately
                   for non-retryable errors
    """
    last_exc: Exception | None = None

    for attempt in range(max_retries + 1):
        try:
            return await coro_factory()
        except Exception as exc:
            last_exc = exc
            error_class = classify_error(exc)

            if error_class == "permanent":
                logger.warning(
                    "Permanent error (not retrying): %s",
                    exc,
                    extra={"error_class": error_class, "attempt": attempt + 1},
                )
                raise

            if attempt == max_retries:
                logger.error(
                    "Max retries exceeded (%d attempts): %s",
                    max_retries + 1,
                    exc,
                    extra={"error_class": error_class, "attempt": attempt + 1},
                )
                raise

            delay = min(base_delay * (2**attempt), max_delay)
            # Jitter: 50% ~ 150% of delay
            jittered_delay = delay * (0.5 + random.random())
            logger.warning(
                "Retryable error (attempt %d/%d, retry in %.1fs): %s",
                attempt + 1,
                max_retries + 1,
                jittered_delay,
                exc,
                extra={
                    "error_class": error_class,
                    "attempt": attempt + 1,
                    "delay": jittered_delay,
                },
            )
            await asyncio.sleep(jittered_delay)

    # Unreachable, keeps the type checker satisfied
    if last_exc:
        raise last_exc
    raise RuntimeError("Unexpected state in with_retry")
