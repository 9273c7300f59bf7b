# src/sources/adapters/music_popularity.py — v1
"""Soundtrack popularity adapter (JioSaavn, optionally Spotify).

Reports a play-count bucket and track count for the matching soundtrack
album. Spotify is only queried when an access token is configured; its
signals carry a ``spotify_`` prefix.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from signalgate.core.errors import SourceFetchError
from signalgate.core.models import (
    BooleanSignal,
    BucketLabel,
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

logger = logging.getLogger(__name__)

_JIOSAAVN_URL = "https://www.jiosaavn.com/api.php"
_SPOTIFY_URL = "https://api.spotify.com/v1/search"
_EXPECTED_SIGNALS = 6
_FULL_TRACK_LIST = 20


def play_count_bucket(play_count: int) -> BucketLabel:
    if play_count < 10_000:
        return "very_low"
    if play_count < 100_000:
        return "low"
    if play_count < 1_000_000:
        return "medium"
    if play_count < 10_000_000:
        return "high"
    return "very_high"


def track_count_signal(count: int) -> NumericSignal:
    return NumericSignal(
        value=min(count / _FULL_TRACK_LIST, 1.0) * 100,
        raw_value=count,
        scale=f"0-{_FULL_TRACK_LIST}",
    )


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _find_album(
    albums: list[dict[str, Any]],
    title: str,
    year: int,
    name_key: str,
    year_of: Callable[[dict[str, Any]], str],
) -> dict[str, Any] | None:
    title = title.lower()
    for album in albums:
        if title in str(album.get(name_key) or "").lower():
            return album
        if year_of(album) == str(year):
            return album
    return None


class MusicPopularityAdapter(BaseSourceAdapter):
    config = SourceConfig(
        id="music_popularity",
        name="Music Popularity (JioSaavn/Spotify)",
        tier=SourceTier.SIGNAL,
        rate_limit_per_minute=10,
        cache_days=7,
        feature_flag_key="comparison_jiosaavn",
        base_url="https://www.jiosaavn.com",
    )

    async def _fetch_internal(self, query: ComparisonQuery) -> ComparisonResult:
        signals: dict[str, Signal] = {}
        failure: SourceFetchError | None = None

        lookups = [self._jiosaavn_signals]
        if self._context.api_key(self.config.id):
            lookups.append(self._spotify_signals)
        for lookup in lookups:
            try:
                signals.update(await lookup(query))
            except SourceFetchError as e:
                logger.warning("%s lookup failed: %s", self.config.id, e)
                failure = failure or e

        if not signals:
            if failure is not None:
                raise failure
            return self._not_found("No music data found")
        return self._success(signals, signal_strength(len(signals), _EXPECTED_SIGNALS))

    async def _jiosaavn_signals(self, query: ComparisonQuery) -> dict[str, Signal]:
        data = await self._get_json(
            _JIOSAAVN_URL,
            params={
                "__call": "search.getAlbumResults",
                "p": 1,
                "q": query.title_en,
                "_format": "json",
                "_marker": 0,
                "ctx": "wap6dot0",
                "api_version": 4,
            },
        )
        albums = data.get("results") or (data.get("albums") or {}).get("data") or []
        match = _find_album(
            albums, query.title_en, query.release_year, "title",
            lambda album: str(album.get("year") or ""),
        )
        if match is None:
            return {}

        signals: dict[str, Signal] = {}
        plays = _as_int(match.get("play_count"))
        if plays is not None:
            signals["play_count_bucket"] = bucket_signal(play_count_bucket(plays))
        songs = _as_int(match.get("song_count"))
        if songs is not None:
            signals["track_count"] = track_count_signal(songs)
        signals["has_soundtrack"] = BooleanSignal(value=True)
        if match.get("primary_artists"):
            signals["artist_present"] = BooleanSignal(value=True)
        return signals

    async def _spotify_signals(self, query: ComparisonQuery) -> dict[str, Signal]:
        data = await self._get_json(
            _SPOTIFY_URL,
            params={"q": f"{query.title_en} soundtrack", "type": "album", "limit": 5},
            headers={"Authorization": f"Bearer {self._context.api_key(self.config.id)}"},
        )
        albums = (data.get("albums") or {}).get("items") or []
        match = _find_album(
            albums, query.title_en, query.release_year, "name",
            lambda album: str(album.get("release_date") or "")[:4],
        )
        if match is None:
            return {}

        signals: dict[str, Signal] = {}
        popularity = _as_int(match.get("popularity"))
        if popularity is not None:
            signals["spotify_popularity"] = NumericSignal(
                value=min(max(popularity, 0), 100), raw_value=popularity, scale="percentage"
            )
        tracks = _as_int(match.get("total_tracks"))
        if tracks is not None:
            signals["spotify_track_count"] = track_count_signal(tracks)
        signals["spotify_available_on_spotify"] = BooleanSignal(value=True)
        return signals
