# src/execution/controller.py — v1
"""Bounded-concurrency, rate-limited, retrying batch runner.

Every fan-out in the package (source fetches, per-movie stages) goes
through ExecutionController.process_all():

  batch loop ──► abort check ──► per item:
      rate limiter wait (per source key)
      ──► semaphore permit (concurrency ceiling)
      ──► processor(item) with linear-backoff retry
      ──► progress callback

Cancellation is checked only between batches; items already scheduled in
the current batch always finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from signalgate.core.errors import RetryExhausted
from signalgate.execution.models import (
    ExecutionConfig,
    ExecutionResult,
    FailedItem,
    ProgressInfo,
)
from signalgate.execution.rate_limiter import MinIntervalRateLimiter
from signalgate.execution.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[ProgressInfo], Any]


@dataclass
class _RunState:
    total: int
    total_batches: int
    started_at: float
    processed: int = 0
    item_time_s: float = 0.0
    current_batch: int = 0
    halted: bool = False


class ExecutionController:
    """Run a processor over many items under concurrency and rate limits.

    Args:
        config: Limits; defaults to ExecutionConfig().
        rate_limiter: Shared limiter. Defaults to one spacing every key by
            ``config.rate_limit_ms``.
        sleep: Awaitable sleep used for retry backoff (injectable for tests).
    """

    def __init__(
        self,
        config: ExecutionConfig | None = None,
        rate_limiter: MinIntervalRateLimiter | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or ExecutionConfig()
        self._rate_limiter = rate_limiter or MinIntervalRateLimiter(
            self._config.rate_limit_ms / 1000.0
        )
        self._sleep = sleep
        self._retry_policy = RetryPolicy(
            attempts=self._config.retry_attempts,
            delay_s=self._config.retry_delay_ms / 1000.0,
        )
        self._abort = asyncio.Event()

    @property
    def config(self) -> ExecutionConfig:
        return self._config

    @property
    def aborted(self) -> bool:
        return self._abort.is_set()

    def abort(self) -> None:
        """Request a stop before the next batch starts."""
        logger.info("Abort requested")
        self._abort.set()

    def reset(self) -> None:
        """Clear a previous abort so the controller can be reused."""
        self._abort.clear()

    async def process_all(
        self,
        items: Iterable[T],
        processor: Callable[[T], Awaitable[R]],
        *,
        on_progress: ProgressCallback | None = None,
        source_key: str = "default",
        item_key: Callable[[T], str] | None = None,
    ) -> ExecutionResult[T, R]:
        """Process every item and collect successes and failures.

        Args:
            items: Work items.
            processor: Async callable applied to each item.
            on_progress: Called after every finished item.
            source_key: Rate-limiter key shared by all items of this run.
            item_key: Label for an item in logs and retry errors.

        Returns:
            ExecutionResult with succeeded/failed/skipped items and duration.
        """
        work = list(items)
        size = self._config.batch_size
        batches = [work[i : i + size] for i in range(0, len(work), size)]
        state = _RunState(
            total=len(work),
            total_batches=len(batches),
            started_at=time.monotonic(),
        )
        result: ExecutionResult[T, R] = ExecutionResult()
        semaphore = asyncio.Semaphore(self._config.concurrency)

        for index, batch in enumerate(batches, start=1):
            if self._abort.is_set():
                logger.info(
                    "Stopping before batch %d/%d: abort requested",
                    index, len(batches),
                )
                result.cancelled = True
                result.skipped.extend(item for b in batches[index - 1 :] for item in b)
                break
            if state.halted:
                result.skipped.extend(item for b in batches[index - 1 :] for item in b)
                break

            state.current_batch = index
            logger.debug("Batch %d/%d: %d item(s)", index, len(batches), len(batch))
            await asyncio.gather(
                *(
                    self._run_item(
                        item, processor, semaphore, state, result,
                        on_progress, source_key, item_key,
                    )
                    for item in batch
                )
            )

        result.halted = state.halted
        result.duration_ms = int((time.monotonic() - state.started_at) * 1000)
        logger.info(
            "Processed %d/%d item(s): %d succeeded, %d failed in %dms",
            state.processed, state.total, len(result.succeeded),
            len(result.failed), result.duration_ms,
        )
        return result

    async def _run_item(
        self,
        item: T,
        processor: Callable[[T], Awaitable[R]],
        semaphore: asyncio.Semaphore,
        state: _RunState,
        result: ExecutionResult[T, R],
        on_progress: ProgressCallback | None,
        source_key: str,
        item_key: Callable[[T], str] | None,
    ) -> None:
        if state.halted:
            result.skipped.append(item)
            return

        await self._rate_limiter.wait(source_key)

        async with semaphore:
            if state.halted:
                result.skipped.append(item)
                return

            key = item_key(item) if item_key else repr(item)
            started = time.monotonic()
            try:
                value = await with_retry(
                    processor, item,
                    key=key, policy=self._retry_policy, sleep=self._sleep,
                )
            except RetryExhausted as e:
                logger.error("%s failed after %d attempt(s): %s", key, e.attempts, e.last_error)
                result.failed.append(
                    FailedItem(item=item, error=e.last_error, attempts=e.attempts)
                )
                if not self._config.continue_on_error:
                    logger.warning("Halting run after failure of %s", key)
                    state.halted = True
            else:
                result.succeeded.append((item, value))

            state.processed += 1
            state.item_time_s += time.monotonic() - started

        if on_progress is not None:
            self._report(on_progress, state, result)

    def _report(
        self,
        on_progress: ProgressCallback,
        state: _RunState,
        result: ExecutionResult[Any, Any],
    ) -> None:
        average_s = state.item_time_s / state.processed if state.processed else 0.0
        remaining = state.total - state.processed
        info = ProgressInfo(
            total=state.total,
            processed=state.processed,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
            current_batch=state.current_batch,
            total_batches=state.total_batches,
            elapsed_ms=int((time.monotonic() - state.started_at) * 1000),
            eta_ms=int(average_s * remaining * 1000),
        )
        try:
            on_progress(info)
        except Exception as e:
            logger.warning("Progress callback failed: %s", e)


class ProgressReporter:
    """Progress callback that logs at most once per ``interval_s`` (and at completion)."""

    def __init__(
        self,
        label: str,
        interval_s: float = 5.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._label = label
        self._interval_s = interval_s
        self._clock = clock
        self._last_logged: float | None = None
        self.last: ProgressInfo | None = None

    def __call__(self, info: ProgressInfo) -> None:
        self.last = info
        now = self._clock()
        finished = info.processed >= info.total
        if (
            not finished
            and self._last_logged is not None
            and now - self._last_logged < self._interval_s
        ):
            return
        self._last_logged = now
        logger.info(
            "%s: %d/%d (%.1f%%) ok=%d failed=%d eta=%.1fs",
            self._label, info.processed, info.total, info.percent,
            info.succeeded, info.failed, info.eta_ms / 1000,
        )


async def run_parallel(
    tasks: Sequence[Callable[[], Awaitable[R]]],
    concurrency: int = 10,
) -> list[R]:
    """Run zero-argument coroutine factories with at most ``concurrency`` in flight.

    Results are returned in input order. The first exception propagates.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")
    semaphore = asyncio.Semaphore(concurrency)

    async def _guarded(task: Callable[[], Awaitable[R]]) -> R:
        async with semaphore:
            return await task()

    return list(await asyncio.gather(*(_guarded(t) for t in tasks)))
