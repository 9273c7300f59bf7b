# src/sources/adapters/rotten_tomatoes.py — v1
"""Rotten Tomatoes adapter: critic/audience scores and freshness.

Uses the public search endpoint; only scores and cast size are kept.
"""

from __future__ import annotations

import logging
from typing import Any

from signalgate.core.models import (
    CategoricalSignal,
    ComparisonQuery,
    ComparisonResult,
    NumericSignal,
    Signal,
    SourceConfig,
    SourceTier,
)
from signalgate.sources.base_adapter import (
    BaseSourceAdapter,
    normalize_rating,
    signal_strength,
)

logger = logging.getLogger(__name__)

_SEARCH_URL = "https://www.rottentomatoes.com/api/private/v2.0/search"
_FRESHNESS = ["certified_fresh", "fresh", "rotten", "unknown"]
_EXPECTED_SIGNALS = 4
_MAX_CAST = 5


class RottenTomatoesAdapter(BaseSourceAdapter):
    config = SourceConfig(
        id="rotten_tomatoes",
        name="Rotten Tomatoes",
        tier=SourceTier.AGGREGATOR,
        rate_limit_per_minute=12,
        cache_days=30,
        feature_flag_key="comparison_rotten_tomatoes",
        base_url="https://www.rottentomatoes.com",
    )

    async def _fetch_internal(self, query: ComparisonQuery) -> ComparisonResult:
        data = await self._get_json(_SEARCH_URL, params={"q": query.title_en, "limit": 5})
        match = _find_match(data.get("movies") or [], query)
        if match is None:
            return self._not_found(f"No match for {query.title_en} ({query.release_year})")

        signals: dict[str, Signal] = {}

        for field_name, key in (("critic_score", "meterScore"), ("audience_score", "audienceScore")):
            raw = match.get(key)
            if raw is not None:
                signals[field_name] = NumericSignal(
                    value=normalize_rating(float(raw), "percentage"),
                    raw_value=float(raw),
                    scale="percentage",
                )

        meter_class = match.get("meterClass")
        if meter_class:
            signals["freshness"] = CategoricalSignal(
                value=meter_class if meter_class in _FRESHNESS else "unknown",
                allowed_values=_FRESHNESS,
            )

        cast_names = [
            c.get("name") for c in (match.get("castItems") or [])[:_MAX_CAST]
            if isinstance(c, dict) and c.get("name")
        ]
        if cast_names:
            signals["cast_count"] = NumericSignal(
                value=min(len(cast_names) / _MAX_CAST, 1.0) * 100,
                raw_value=len(cast_names),
                scale="0-5",
            )

        return self._success(signals, signal_strength(len(signals), _EXPECTED_SIGNALS))


def _find_match(movies: list[dict[str, Any]], query: ComparisonQuery) -> dict[str, Any] | None:
    """First search hit with the same year or a title containing ours."""
    title = query.title_en.lower()
    for movie in movies:
        if not isinstance(movie, dict):
            continue
        if movie.get("year") == query.release_year:
            return movie
        if title in str(movie.get("name") or "").lower():
            return movie
    return None
