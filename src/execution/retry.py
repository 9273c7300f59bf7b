# src/execution/retry.py — v1
"""Bounded retry with linear backoff: attempt N waits N x delay."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from signalgate.core.errors import RetryExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try, and the base delay between tries."""

    attempts: int = 3
    delay_s: float = 1.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return self.delay_s * attempt


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    key: str = "unknown",
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    **kwargs: Any,
) -> Any:
    """Execute an async function, retrying on failure.

    Errors outside ``policy.retry_on`` propagate immediately.

    Raises:
        RetryExhausted: If every attempt failed.
    """
    policy = policy or RetryPolicy()
    attempt = 0

    while True:
        attempt += 1
        try:
            return await fn(*args, **kwargs)
        except policy.retry_on as e:
            if attempt >= policy.attempts:
                raise RetryExhausted(key, attempt, e) from e

            delay = policy.delay_for(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                key, attempt, policy.attempts, e, delay,
            )
            await sleep(delay)
