# src/sources/adapters/trailer_visibility.py — v1
"""YouTube trailer visibility adapter.

Finds the top trailer search hit and reports view/engagement buckets,
whether it came from an official-looking channel, and its age.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from signalgate.core.models import (
    BooleanSignal,
    BucketLabel,
    ComparisonQuery,
    ComparisonResult,
    NumericSignal,
    Signal,
    SourceConfig,
    SourceTier,
    utc_now,
)
from signalgate.sources.base_adapter import (
    BaseSourceAdapter,
    bucket_signal,
    signal_strength,
)
from signalgate.sources.context import SourceContext

_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"
_EXPECTED_SIGNALS = 5
_OFFICIAL_MARKERS = ("official", "music", "films", "movies")


def view_count_bucket(views: int) -> BucketLabel:
    if views < 100_000:
        return "very_low"
    if views < 1_000_000:
        return "low"
    if views < 10_000_000:
        return "medium"
    if views < 100_000_000:
        return "high"
    return "very_high"


def engagement_bucket(rate_percent: float) -> BucketLabel:
    if rate_percent < 1:
        return "very_low"
    if rate_percent < 2:
        return "low"
    if rate_percent < 3:
        return "medium"
    if rate_percent < 5:
        return "high"
    return "very_high"


def _parse_published(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


class TrailerVisibilityAdapter(BaseSourceAdapter):
    config = SourceConfig(
        id="trailer_visibility",
        name="Trailer Visibility",
        tier=SourceTier.SIGNAL,
        rate_limit_per_minute=10,
        cache_days=7,
        feature_flag_key="comparison_youtube",
        requires_api_key=True,
        base_url="https://www.youtube.com",
    )

    def __init__(
        self, context: SourceContext, now: Callable[[], datetime] = utc_now
    ) -> None:
        super().__init__(context)
        self._now = now

    def can_handle(self, query: ComparisonQuery) -> bool:
        return bool(
            query.title_en and query.release_year
            and self._context.api_key(self.config.id)
        )

    async def _fetch_internal(self, query: ComparisonQuery) -> ComparisonResult:
        api_key = self._require_api_key()
        language = query.language or "Telugu"
        search = await self._get_json(
            _SEARCH_URL,
            params={
                "part": "snippet",
                "q": f"{query.title_en} {query.release_year} official trailer {language}",
                "type": "video",
                "maxResults": 5,
                "key": api_key,
            },
        )
        hits = search.get("items") or []
        if not hits:
            return self._not_found("No trailer found")
        video_id = (hits[0].get("id") or {}).get("videoId")
        if not video_id:
            return self._not_found("No video ID")

        stats = await self._get_json(
            _VIDEOS_URL,
            params={"part": "statistics,snippet", "id": video_id, "key": api_key},
        )
        videos = stats.get("items") or []
        if not videos:
            return self._not_found("Video not found")

        signals = self._signals(videos[0])
        return self._success(signals, signal_strength(len(signals), _EXPECTED_SIGNALS))

    def _signals(self, video: dict[str, Any]) -> dict[str, Signal]:
        statistics = video.get("statistics") or {}
        snippet = video.get("snippet") or {}
        signals: dict[str, Signal] = {"has_trailer": BooleanSignal(value=True)}

        views = int(statistics.get("viewCount") or 0)
        signals["view_count_bucket"] = bucket_signal(view_count_bucket(views))

        likes = int(statistics.get("likeCount") or 0)
        if likes > 0 and views > 0:
            signals["engagement_bucket"] = bucket_signal(
                engagement_bucket(likes / views * 100)
            )

        channel = str(snippet.get("channelTitle") or "").lower()
        signals["official_channel"] = BooleanSignal(
            value=any(marker in channel for marker in _OFFICIAL_MARKERS)
        )

        published = _parse_published(snippet.get("publishedAt"))
        if published is not None:
            if published.tzinfo is None:
                published = published.replace(tzinfo=timezone.utc)
            age_days = max((self._now() - published).days, 0)
            signals["trailer_age_days"] = NumericSignal(
                value=min(age_days / 365, 1.0) * 100,
                raw_value=age_days,
                scale="0-365",
            )

        return signals
