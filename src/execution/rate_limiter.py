# src/execution/rate_limiter.py — v1
"""Rate limiters shared by the execution controller and source adapters.

MinIntervalRateLimiter spaces request starts per key on a monotonic clock.
TokenBucketRateLimiter allows short bursts up to a bucket size.
Neither is coordinated across processes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class MinIntervalRateLimiter:
    """Guarantees at least ``min_interval_s`` between consecutive starts per key.

    Waiters for the same key queue on a per-key lock, so spacing holds even
    when many tasks call wait() at once.

    Args:
        min_interval_s: Default spacing for keys without an explicit interval.
        clock: Monotonic time source (seconds).
        sleep: Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        min_interval_s: float = 0.0,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._default_interval = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._intervals: dict[str, float] = {}
        self._last_start: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def configure(self, key: str, min_interval_s: float) -> None:
        """Set the spacing for one key."""
        self._intervals[key] = min_interval_s

    def interval_for(self, key: str) -> float:
        return self._intervals.get(key, self._default_interval)

    def last_start(self, key: str) -> float | None:
        return self._last_start.get(key)

    async def wait(self, key: str = "default") -> float:
        """Block until ``key`` may issue its next request.

        Returns:
            Seconds actually waited.
        """
        interval = self.interval_for(key)
        if interval <= 0:
            self._last_start[key] = self._clock()
            return 0.0

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            waited = 0.0
            last = self._last_start.get(key)
            if last is not None:
                remaining = last + interval - self._clock()
                if remaining > 0:
                    logger.debug("Rate limit %s: waiting %.3fs", key, remaining)
                    await self._sleep(remaining)
                    waited = remaining
            self._last_start[key] = self._clock()
            return waited

    def reset(self, key: str | None = None) -> None:
        """Forget request history for one key, or for all keys."""
        if key is None:
            self._last_start.clear()
        else:
            self._last_start.pop(key, None)


class TokenBucketRateLimiter:
    """Token bucket: refills at ``tokens_per_second`` up to ``max_tokens``."""

    def __init__(
        self,
        tokens_per_second: float,
        max_tokens: float,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if tokens_per_second <= 0:
            raise ValueError("tokens_per_second must be > 0")
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        self._rate = tokens_per_second
        self._max_tokens = max_tokens
        self._tokens = max_tokens
        self._clock = clock
        self._sleep = sleep
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(self._max_tokens, self._tokens + elapsed * self._rate)
            self._last_refill = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            self._refill()
            if self._tokens < 1:
                await self._sleep((1 - self._tokens) / self._rate)
                self._refill()
            self._tokens -= 1
