"""
DesignSync Retry Helper.

Exponential backoff for idempotent remote reads.
Requires Python 3.11+.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from utils.logger import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    retry_on: tuple[type[BaseException], ...],
    max_attempts: int = 3,
    base_delay_ms: int = 1000,
    max_delay_ms: int = 10000,
) -> T:
    """
    Await ``fn()`` until it succeeds or attempts run out.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates on the first failure. The delay doubles after every
    failed attempt and is capped at ``max_delay_ms``.

    Args:
        fn: Zero-argument coroutine factory
        retry_on: Exception types considered transient
        max_attempts: Total number of attempts (at least 1)
        base_delay_ms: Delay after the first failure
        max_delay_ms: Upper bound for any single delay

    Returns:
        The result of the first successful call
    """
    attempts = max(1, max_attempts)

    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except retry_on as e:
            if attempt == attempts:
                raise
            delay_ms = min(base_delay_ms * (2 ** (attempt - 1)), max_delay_ms)
            logger.warning(
                "retrying_after_failure",
                attempt=attempt,
                max_attempts=attempts,
                delay_ms=delay_ms,
                error=str(e),
            )
            await asyncio.sleep(delay_ms / 1000.0)

    raise AssertionError("unreachable")
