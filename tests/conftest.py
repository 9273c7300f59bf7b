# tests/conftest.py — v1
"""Shared test fixtures for unit tests.

Provides a fake clock/sleep pair, sample movie records, comparison results
and an isolated SourceContext. No network: HTTP goes through
httpx.MockTransport.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from signalgate.classification.models import MovieRecord
from signalgate.core.models import (
    BooleanSignal,
    ComparisonQuery,
    ComparisonResult,
    NumericSignal,
    SourceTier,
)
from signalgate.sources.cache import ResultCache
from signalgate.sources.context import SourceContext


# === FIXTURES: Time ===


class FakeClock:
    """Monotonic clock that only moves when told to (or when fake-slept)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_query() -> ComparisonQuery:
    return ComparisonQuery(title_en="Eega", release_year=2012, tmdb_id=101)


@pytest.fixture
def sample_movie() -> MovieRecord:
    """A well-formed modern record with several independent signals."""
    return MovieRecord(
        id="m-001",
        title_en="Jersey",
        release_year=2019,
        slug="jersey-2019",
        genres=["Drama", "Sports"],
        mood_tags=["emotional", "inspirational"],
        audience_fit={"family_watch": True},
        hero="Nani",
        director="Gowtam Tinnanuri",
        runtime_minutes=160,
        avg_rating=8.4,
    )


def make_result(
    source_id: str,
    tier: SourceTier = SourceTier.AGGREGATOR,
    success: bool = True,
    rating: float | None = None,
    rating_name: str = "critic_score",
    error_kind: str | None = None,
) -> ComparisonResult:
    """ComparisonResult with an optional rating-like numeric signal."""
    signals = {}
    if success:
        signals["has_coverage"] = BooleanSignal(value=True)
        if rating is not None:
            signals[rating_name] = NumericSignal(value=rating, raw_value=rating, scale="percentage")
    return ComparisonResult(
        source_id=source_id,
        source_tier=tier,
        success=success,
        signals=signals,
        signal_strength=1.0 if success else 0.0,
        confidence_weight=0.7 if success else 0.0,
        error=None if success else "failed",
        error_kind=None if success else (error_kind or "fetch"),
    )


@pytest.fixture
def result_factory() -> Callable[..., ComparisonResult]:
    return make_result


# === FIXTURES: Source context ===

ALL_FLAGS = {
    "comparison_sources_enabled": True,
    "comparison_rotten_tomatoes": True,
    "comparison_google_kg": True,
    "comparison_idlebrain": True,
    "comparison_youtube": True,
    "comparison_jiosaavn": True,
}


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _offline(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected request: {request.url}")


@pytest.fixture
def context_factory(fake_clock: FakeClock) -> Callable[..., SourceContext]:
    """Build a SourceContext whose HTTP traffic goes to ``handler``.

    Every source is enabled and keyed; rate limiting runs on the fake clock.
    """
    from signalgate.execution.rate_limiter import MinIntervalRateLimiter

    def _make(
        handler: Callable[[httpx.Request], httpx.Response] = _offline,
        api_keys: dict[str, str] | None = None,
    ) -> SourceContext:
        return SourceContext(
            flags=dict(ALL_FLAGS),
            api_keys=(
                api_keys if api_keys is not None
                else {"google_kg": "kg-key", "trailer_visibility": "yt-key"}
            ),
            cache=ResultCache(clock=fake_clock),
            rate_limiter=MinIntervalRateLimiter(clock=fake_clock, sleep=fake_clock.sleep),
            http_client=mock_client(handler),
        )

    return _make


@pytest.fixture
def source_context(context_factory: Callable[..., SourceContext]) -> SourceContext:
    """Every source enabled, keys configured, no real network or waiting."""
    return context_factory()
