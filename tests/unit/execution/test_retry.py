# tests/unit/execution/test_retry.py — v1
"""Tests for execution/retry.py."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from signalgate.core.errors import RetryExhausted
from signalgate.execution.retry import RetryPolicy, with_retry


class TestRetryPolicy:
    def test_linear_backoff(self):
        policy = RetryPolicy(attempts=3, delay_s=0.5)
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [0.5, 1.0, 1.5]


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self, fake_clock):
        fn = AsyncMock(return_value="ok")
        assert await with_retry(fn, 1, sleep=fake_clock.sleep) == "ok"
        fn.assert_awaited_once_with(1)
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, fake_clock):
        fn = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), "ok"])
        result = await with_retry(
            fn, policy=RetryPolicy(attempts=3, delay_s=1.0), sleep=fake_clock.sleep
        )
        assert result == "ok"
        assert fake_clock.sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted(self, fake_clock):
        fn = AsyncMock(side_effect=RuntimeError("down"))
        with pytest.raises(RetryExhausted) as exc_info:
            await with_retry(
                fn, key="tmdb:1", policy=RetryPolicy(attempts=2, delay_s=0.1),
                sleep=fake_clock.sleep,
            )
        assert exc_info.value.key == "tmdb:1"
        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.last_error, RuntimeError)
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_propagates(self, fake_clock):
        fn = AsyncMock(side_effect=KeyError("x"))
        with pytest.raises(KeyError):
            await with_retry(
                fn, policy=RetryPolicy(retry_on=(RuntimeError,)), sleep=fake_clock.sleep
            )
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_kwargs_forwarded(self, fake_clock):
        fn = AsyncMock(return_value=1)
        await with_retry(fn, "a", sleep=fake_clock.sleep, flag=True)
        fn.assert_awaited_once_with("a", flag=True)
