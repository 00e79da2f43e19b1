"""Bounded retry loop shared by part uploads and remote deletes."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from services.config import RetryPolicy
from services.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_HTTP_CODES = frozenset({503, 504})


def is_retryable(error: StoreError) -> bool:
    """Transient: a timeout, or 503/504 from the store. Everything else is permanent."""
    message = (error.message or "").lower()
    return "timeout" in message or error.http_code in RETRYABLE_HTTP_CODES


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    label: str,
    abort: asyncio.Event | None = None,
    on_failure: Callable[[int, StoreError], None] | None = None,
) -> T:
    """
    Await `operation()` up to `policy.max_retries + 1` times.

    Only retryable StoreErrors trigger another attempt; the last error is
    re-raised unchanged once the bound is reached, the error is permanent,
    or `abort` has been set.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except StoreError as exc:
            if on_failure is not None:
                on_failure(attempt, exc)
            if not is_retryable(exc) or attempt >= policy.max_retries:
                raise
            if abort is not None and abort.is_set():
                logger.info("[retry] %s: aborted, not scheduling retry %d", label, attempt + 1)
                raise
            attempt += 1
            delay = policy.delay_for(attempt)
            logger.warning(
                "[retry] %s failed (%s, http=%s); retry %d/%d in %.1fs",
                label,
                exc.message,
                exc.http_code,
                attempt,
                policy.max_retries,
                delay,
            )
            await asyncio.sleep(delay)
            if abort is not None and abort.is_set():
                raise
