# src/sources/adapters/google_kg.py — v1
"""Google Knowledge Graph adapter: entity existence and richness signals.

A primary-tier identity check. No description text is stored, only its
length bucket.
"""

from __future__ import annotations

from typing import Any

from signalgate.core.models import (
    BooleanSignal,
    ComparisonQuery,
    ComparisonResult,
    NumericSignal,
    Signal,
    SourceConfig,
    SourceTier,
)
from signalgate.sources.base_adapter import (
    BaseSourceAdapter,
    bucket_signal,
    signal_strength,
)

_SEARCH_URL = "https://kgsearch.googleapis.com/v1/entities:search"
_EXPECTED_SIGNALS = 7


def _description_bucket(length: int) -> str:
    if length < 100:
        return "very_low"
    if length < 300:
        return "low"
    if length < 500:
        return "medium"
    if length < 1000:
        return "high"
    return "very_high"


class GoogleKnowledgeGraphAdapter(BaseSourceAdapter):
    config = SourceConfig(
        id="google_kg",
        name="Google Knowledge Graph",
        tier=SourceTier.PRIMARY,
        rate_limit_per_minute=100,
        cache_days=90,
        feature_flag_key="comparison_google_kg",
        requires_api_key=True,
        base_url="https://kgsearch.googleapis.com",
    )

    def can_handle(self, query: ComparisonQuery) -> bool:
        return bool(query.title_en and self._context.api_key(self.config.id))

    async def _fetch_internal(self, query: ComparisonQuery) -> ComparisonResult:
        api_key = self._require_api_key()
        params: dict[str, Any] = {
            "query": f"{query.title_en} {query.release_year} film",
            "key": api_key,
            "limit": 5,
            "languages": "en",
        }

        data = await self._get_json(_SEARCH_URL, params={**params, "types": "Movie"})
        items = data.get("itemListElement") or []
        if not items:
            # Retry without the type restriction
            data = await self._get_json(_SEARCH_URL, params=params)
            items = data.get("itemListElement") or []
        if not items:
            return self._not_found("No KG entity found")

        best = _best_match(items, query)
        if best is None:
            return self._not_found("No matching entity")
        return self._success(*self._signals(best))

    def _signals(self, item: dict[str, Any]) -> tuple[dict[str, Signal], float]:
        entity = item.get("result") or {}
        signals: dict[str, Signal] = {"entity_confirmed": BooleanSignal(value=True)}

        score = float(item.get("resultScore") or 0.0)
        signals["entity_relevance"] = NumericSignal(
            value=min(score * 100, 100.0), raw_value=score, scale="0-1"
        )

        types = entity.get("@type") or []
        signals["is_movie_type"] = BooleanSignal(
            value=any("movie" in t.lower() or "film" in t.lower() for t in types)
        )

        detailed = entity.get("detailedDescription") or {}
        body = detailed.get("articleBody") or ""
        signals["has_kg_description"] = BooleanSignal(value=bool(body))
        if body:
            signals["description_length_bucket"] = bucket_signal(
                _description_bucket(len(body))  # type: ignore[arg-type]
            )

        image = entity.get("image") or {}
        signals["has_kg_image"] = BooleanSignal(value=bool(image.get("url")))
        signals["has_wikipedia_link"] = BooleanSignal(
            value="wikipedia.org" in str(detailed.get("url") or "")
        )

        return signals, signal_strength(len(signals), _EXPECTED_SIGNALS)


def _best_match(items: list[dict[str, Any]], query: ComparisonQuery) -> dict[str, Any] | None:
    title = query.title_en.lower()
    year = str(query.release_year)
    for item in items:
        entity = item.get("result")
        if not entity:
            continue
        name = str(entity.get("name") or "").lower()
        description = str(entity.get("description") or "").lower()
        if title in name or year in description or "film" in description or "movie" in description:
            return item
    return None
