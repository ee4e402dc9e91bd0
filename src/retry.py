"""Bounded async retry with linear backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.errors import MaxRetriesExceededError
from src.pipeline_config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``policy.max_attempts`` is reached.

    Every ``Exception`` is retried the same way; there is no distinction
    between transient and deterministic failures. When the last attempt fails
    its exception is re-raised untouched. Cancellation is a ``BaseException``
    and is never caught, so cancelling the caller also abandons pending
    retries.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        policy: Attempt count and base delay.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        Whatever the first successful attempt returned.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt == policy.max_attempts:
                logger.warning(
                    "Giving up after %d attempt(s): %s", attempt, exc
                )
                raise
            delay = policy.delay_for(attempt)
            logger.info(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt,
                policy.max_attempts,
                exc,
                delay,
            )
            await sleep(delay)

    raise MaxRetriesExceededError("Max retries exceeded")
