# tests/unit/execution/test_rate_limiter.py — v1
"""Tests for execution/rate_limiter.py — driven by a fake clock, no real sleeps."""

from __future__ import annotations

import asyncio

import pytest

from signalgate.execution.rate_limiter import MinIntervalRateLimiter, TokenBucketRateLimiter


class TestMinIntervalRateLimiter:
    @pytest.mark.asyncio
    async def test_first_call_does_not_wait(self, fake_clock):
        limiter = MinIntervalRateLimiter(1.0, clock=fake_clock, sleep=fake_clock.sleep)
        assert await limiter.wait("a") == 0.0
        assert limiter.last_start("a") == fake_clock.now

    @pytest.mark.asyncio
    async def test_spacing_enforced(self, fake_clock):
        limiter = MinIntervalRateLimiter(1.0, clock=fake_clock, sleep=fake_clock.sleep)
        await limiter.wait("a")
        fake_clock.advance(0.25)
        waited = await limiter.wait("a")
        assert waited == pytest.approx(0.75)
        assert fake_clock.sleeps == [pytest.approx(0.75)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self, fake_clock):
        limiter = MinIntervalRateLimiter(1.0, clock=fake_clock, sleep=fake_clock.sleep)
        await limiter.wait("a")
        fake_clock.advance(5)
        assert await limiter.wait("a") == 0.0

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, fake_clock):
        limiter = MinIntervalRateLimiter(1.0, clock=fake_clock, sleep=fake_clock.sleep)
        await limiter.wait("a")
        assert await limiter.wait("b") == 0.0

    @pytest.mark.asyncio
    async def test_concurrent_waiters_are_spaced(self, fake_clock):
        limiter = MinIntervalRateLimiter(2.0, clock=fake_clock, sleep=fake_clock.sleep)
        starts: list[float] = []

        async def _call():
            await limiter.wait("src")
            starts.append(fake_clock.now)

        await asyncio.gather(*(_call() for _ in range(3)))
        assert sorted(starts) == [1000.0, 1002.0, 1004.0]

    @pytest.mark.asyncio
    async def test_per_key_interval(self, fake_clock):
        limiter = MinIntervalRateLimiter(0.0, clock=fake_clock, sleep=fake_clock.sleep)
        limiter.configure("slow", 3.0)
        assert limiter.interval_for("slow") == 3.0
        assert limiter.interval_for("other") == 0.0
        await limiter.wait("slow")
        assert await limiter.wait("slow") == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_zero_interval_never_sleeps(self, fake_clock):
        limiter = MinIntervalRateLimiter(0.0, clock=fake_clock, sleep=fake_clock.sleep)
        for _ in range(5):
            await limiter.wait("a")
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_reset(self, fake_clock):
        limiter = MinIntervalRateLimiter(1.0, clock=fake_clock, sleep=fake_clock.sleep)
        await limiter.wait("a")
        await limiter.wait("b")
        limiter.reset("a")
        assert limiter.last_start("a") is None
        assert limiter.last_start("b") is not None
        limiter.reset()
        assert limiter.last_start("b") is None


class TestTokenBucketRateLimiter:
    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            TokenBucketRateLimiter(0, 5)
        with pytest.raises(ValueError):
            TokenBucketRateLimiter(1, 0)

    @pytest.mark.asyncio
    async def test_burst_then_wait(self, fake_clock):
        bucket = TokenBucketRateLimiter(1.0, 2, clock=fake_clock, sleep=fake_clock.sleep)
        await bucket.acquire()
        await bucket.acquire()
        assert fake_clock.sleeps == []
        await bucket.acquire()
        assert fake_clock.sleeps == [pytest.approx(1.0)]
        assert bucket.available == pytest.approx(0.0)

    def test_refill_capped(self, fake_clock):
        bucket = TokenBucketRateLimiter(10.0, 3, clock=fake_clock, sleep=fake_clock.sleep)
        fake_clock.advance(100)
        assert bucket.available == 3
