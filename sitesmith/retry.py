"""Exponential backoff retry for idempotent provider calls.

Only read-only or ensure-state calls go through these helpers. Purchases and
DNS mutations are never retried automatically.
"""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, TypeVar

import httpx
import structlog

from sitesmith.errors import UpstreamError
from sitesmith.metrics import retry_attempts_total, retry_exhausted_total

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """All retry attempts failed."""


def is_transient(exc: BaseException) -> bool:
    """True for transport errors and 5xx/429 provider responses."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, UpstreamError):
        return exc.is_transient
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code >= 500 or code == 429
    return False


def _backoff(attempt: int, base_delay: float, max_delay: float, jitter: bool) -> float:
    delay = min(base_delay * (2**attempt), max_delay)
    if jitter:
        delay = delay * (0.5 + random.random())
    return delay


async def async_with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = True,
    retryable: Callable[[BaseException], bool] = is_transient,
) -> T:
    """Await *fn* with exponential backoff retries.

    Uses jitter (delay * random(0.5, 1.5)) when *jitter* is True. Exceptions
    for which *retryable* returns False propagate immediately.

    Raises RetryExhaustedError after *max_retries* consecutive failures.
    """
    last_exc: Exception | None = None
    fn_label = getattr(fn, "__name__", "fn")
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except Exception as exc:
            if not retryable(exc):
                raise
            last_exc = exc
            if attempt == max_retries:
                break
            retry_attempts_total.labels(fn_name=fn_label).inc()
            delay = _backoff(attempt, base_delay, max_delay, jitter)
            logger.warning(
                "Async retry attempt",
                attempt=attempt + 1,
                max_retries=max_retries,
                fn=fn_label,
                delay_s=round(delay, 2),
                error=str(exc),
            )
            await asyncio.sleep(delay)
    retry_exhausted_total.labels(fn_name=fn_label).inc()
    raise RetryExhaustedError(f"Failed after {max_retries + 1} attempts") from last_exc
