# tests/unit/sources/adapters/test_trailer_visibility.py — v1
"""Tests for sources/adapters/trailer_visibility.py (mocked HTTP)."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from signalgate.sources.adapters.trailer_visibility import (
    TrailerVisibilityAdapter,
    engagement_bucket,
    view_count_bucket,
)

_NOW = datetime(2021, 1, 1, tzinfo=timezone.utc)

_VIDEO = {
    "statistics": {"viewCount": "2500000", "likeCount": "100000"},
    "snippet": {"channelTitle": "Aditya Music", "publishedAt": "2020-01-01T00:00:00Z"},
}


def _youtube(search_items, video_items):
    def _handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["key"] == "yt-key"
        if request.url.path.endswith("/search"):
            assert "official trailer Telugu" in request.url.params["q"]
            return httpx.Response(200, json={"items": search_items})
        assert request.url.params["id"] == "abc123"
        return httpx.Response(200, json={"items": video_items})

    return _handler


class TestBuckets:
    @pytest.mark.parametrize(
        ("views", "label"),
        [(0, "very_low"), (500_000, "low"), (5_000_000, "medium"), (50_000_000, "high"), (10**9, "very_high")],
    )
    def test_view_count(self, views, label):
        assert view_count_bucket(views) == label

    @pytest.mark.parametrize(
        ("rate", "label"),
        [(0.5, "very_low"), (1.5, "low"), (2.5, "medium"), (3.0, "high"), (7.0, "very_high")],
    )
    def test_engagement(self, rate, label):
        assert engagement_bucket(rate) == label


class TestTrailerVisibilityAdapter:
    @pytest.mark.asyncio
    async def test_trailer_signals(self, context_factory, sample_query):
        ctx = context_factory(_youtube([{"id": {"videoId": "abc123"}}], [_VIDEO]))
        adapter = TrailerVisibilityAdapter(ctx, now=lambda: _NOW)
        result = await adapter.fetch(sample_query)

        assert result.success
        assert result.signals["has_trailer"].value is True
        assert result.signals["view_count_bucket"].value == "medium"
        assert result.signals["engagement_bucket"].value == "high"
        assert result.signals["official_channel"].value is True
        assert result.signals["trailer_age_days"].raw_value == 366
        assert result.signals["trailer_age_days"].value == 100.0
        assert result.confidence_weight == pytest.approx(0.3)

    @pytest.mark.asyncio
    async def test_no_likes_skips_engagement(self, context_factory, sample_query):
        video = {"statistics": {"viewCount": "10"}, "snippet": {"channelTitle": "fan uploads"}}
        ctx = context_factory(_youtube([{"id": {"videoId": "abc123"}}], [video]))
        result = await TrailerVisibilityAdapter(ctx, now=lambda: _NOW).fetch(sample_query)
        assert "engagement_bucket" not in result.signals
        assert "trailer_age_days" not in result.signals
        assert result.signals["official_channel"].value is False

    @pytest.mark.asyncio
    async def test_no_search_hits(self, context_factory, sample_query):
        ctx = context_factory(_youtube([], []))
        result = await TrailerVisibilityAdapter(ctx).fetch(sample_query)
        assert result.error_kind == "not_found"
        assert result.error_details == "No trailer found"

    @pytest.mark.asyncio
    async def test_video_gone(self, context_factory, sample_query):
        ctx = context_factory(_youtube([{"id": {"videoId": "abc123"}}], []))
        result = await TrailerVisibilityAdapter(ctx).fetch(sample_query)
        assert result.error_details == "Video not found"

    def test_requires_key(self, context_factory, sample_query):
        adapter = TrailerVisibilityAdapter(context_factory(api_keys={}))
        assert not adapter.can_handle(sample_query)
