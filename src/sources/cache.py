# src/sources/cache.py — v1
"""In-process TTL cache of successful comparison results.

Keyed by (source id, movie id). Failed results are never stored.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from signalgate.core.models import ComparisonResult

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    result: ComparisonResult
    expires_at: float


class ResultCache:
    """Process-wide result cache with an injectable wall clock."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    @staticmethod
    def key(source_id: str, movie_id: str) -> str:
        return f"{source_id}:{movie_id}"

    def get(self, source_id: str, movie_id: str) -> ComparisonResult | None:
        """Return the cached result, evicting it if expired."""
        key = self.key(source_id, movie_id)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.result

    def put(
        self, source_id: str, movie_id: str, result: ComparisonResult, ttl_s: float
    ) -> None:
        if not result.success:
            logger.debug("Not caching failed result for %s", self.key(source_id, movie_id))
            return
        if ttl_s <= 0:
            return
        self._entries[self.key(source_id, movie_id)] = _Entry(
            result=result, expires_at=self._clock() + ttl_s
        )

    def last_fetch(self, source_id: str, movie_id: str) -> datetime | None:
        """When the cached result for this pair was fetched, if still valid."""
        cached = self.get(source_id, movie_id)
        return cached.fetched_at if cached is not None else None

    def is_valid(self, source_id: str, movie_id: str) -> bool:
        return self.get(source_id, movie_id) is not None

    def invalidate(self, source_id: str, movie_id: str) -> None:
        self._entries.pop(self.key(source_id, movie_id), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
