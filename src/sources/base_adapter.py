# src/sources/base_adapter.py — v1
"""Abstract comparison source adapter.

Subclasses declare a SourceConfig and implement _fetch_internal(). The
public fetch() adds the behaviour every source shares:

  feature flags ──► cache lookup ──► rate limit ──► _fetch_internal()
                                                    └─► cache on success

fetch() never raises: configuration problems and fetch failures come back
as failed ComparisonResults.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, ClassVar

import httpx

from signalgate.core.errors import SourceConfigError, SourceFetchError
from signalgate.core.models import (
    BucketLabel,
    BucketSignal,
    ComparisonQuery,
    ComparisonResult,
    ErrorKind,
    Signal,
    SourceConfig,
)
from signalgate.logging.context import set_source_context
from signalgate.sources.context import SourceContext

logger = logging.getLogger(__name__)

# Numeric equivalent reported for each bucket label.
BUCKET_EQUIVALENTS: dict[str, float] = {
    "very_low": 10.0,
    "low": 30.0,
    "medium": 50.0,
    "high": 75.0,
    "very_high": 95.0,
}


def normalize_rating(value: float, scale: str) -> float:
    """Normalize a rating on a known scale to 0-100.

    Args:
        value: Raw rating.
        scale: One of "0-5", "0-10", "percentage".

    Raises:
        ValueError: On an unknown scale.
    """
    if scale == "0-5":
        normalized = value / 5 * 100
    elif scale == "0-10":
        normalized = value * 10
    elif scale == "percentage":
        normalized = value
    else:
        raise ValueError(f"Unknown rating scale: {scale!r}")
    return max(0.0, min(100.0, normalized))


def to_bucket(value: float) -> BucketLabel:
    """Map a 0-100 value to its bucket label."""
    if value < 20:
        return "very_low"
    if value < 40:
        return "low"
    if value < 60:
        return "medium"
    if value < 80:
        return "high"
    return "very_high"


def bucket_signal(label: BucketLabel) -> BucketSignal:
    return BucketSignal(value=label, numeric_equivalent=BUCKET_EQUIVALENTS[label])


class BaseSourceAdapter(ABC):
    """Common fetch pipeline for one external comparison source."""

    config: ClassVar[SourceConfig]

    def __init__(self, context: SourceContext) -> None:
        self._context = context
        context.rate_limiter.configure(self.config.id, self.config.min_delay_s)

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def enabled(self) -> bool:
        return self._context.is_enabled(self.config)

    def can_handle(self, query: ComparisonQuery) -> bool:
        """Whether this source can answer the query at all."""
        return bool(query.title_en and query.release_year)

    @abstractmethod
    async def _fetch_internal(self, query: ComparisonQuery) -> ComparisonResult:
        """Fetch and convert one query. May raise; fetch() converts errors."""

    async def fetch(self, query: ComparisonQuery) -> ComparisonResult:
        """Fetch signals for a query, honouring flags, cache and rate limit."""
        if not self.enabled:
            return self._error(
                "disabled",
                "Source disabled",
                f"Feature flag {self.config.feature_flag_key} is off",
            )

        movie_id = query.movie_id
        cached = self._context.cache.get(self.config.id, movie_id)
        if cached is not None:
            logger.debug("Cache hit: %s/%s", self.config.id, movie_id)
            return cached.with_cache_flag()

        await self._context.rate_limiter.wait(self.config.id)

        set_source_context(self.config.id)
        try:
            result = await self._fetch_internal(query)
        except SourceConfigError as e:
            logger.warning("%s not configured: %s", self.config.id, e)
            return self._error("config", "Not configured", str(e))
        except SourceFetchError as e:
            logger.warning("%s fetch failed: %s", self.config.id, e)
            return self._error("fetch", "Fetch error", str(e))
        except Exception as e:
            logger.warning(
                "%s raised %s: %s", self.config.id, type(e).__name__, e,
                exc_info=True,
            )
            return self._error("fetch", "Fetch error", f"{type(e).__name__}: {e}")
        finally:
            set_source_context(None)

        self._context.cache.put(self.config.id, movie_id, result, self.config.cache_ttl_s)
        return result

    def last_fetch(self, movie_id: str) -> datetime | None:
        return self._context.cache.last_fetch(self.config.id, movie_id)

    def is_cache_valid(self, movie_id: str) -> bool:
        return self._context.cache.is_valid(self.config.id, movie_id)

    # --- Result builders ---

    def _success(self, signals: dict[str, Signal], strength: float) -> ComparisonResult:
        strength = max(0.0, min(1.0, strength))
        return ComparisonResult(
            source_id=self.config.id,
            source_tier=self.config.tier,
            success=True,
            signals=signals,
            signal_strength=strength,
            confidence_weight=self.config.tier_weight * strength,
        )

    def _error(
        self, kind: ErrorKind, error: str, details: str | None = None
    ) -> ComparisonResult:
        return ComparisonResult(
            source_id=self.config.id,
            source_tier=self.config.tier,
            success=False,
            error=error,
            error_details=details,
            error_kind=kind,
        )

    def _not_found(self, details: str) -> ComparisonResult:
        return self._error("not_found", "Not found", details)

    def _require_api_key(self) -> str:
        key = self._context.api_key(self.config.id)
        if not key:
            raise SourceConfigError(self.config.id, "API key not set")
        return key

    # --- HTTP helpers ---

    async def _send(
        self,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await self._context.http_client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise SourceFetchError(self.config.id, f"{type(e).__name__}: {e}") from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise SourceFetchError(
                self.config.id,
                f"Status {response.status_code}",
                status_code=response.status_code,
            )

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET a JSON object.

        Raises:
            SourceFetchError: On transport errors, non-2xx status or bad JSON.
        """
        response = await self._send(url, params, headers)
        self._raise_for_status(response)
        try:
            data = response.json()
        except ValueError as e:
            raise SourceFetchError(self.config.id, f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SourceFetchError(self.config.id, "Expected a JSON object")
        return data

    async def _get_text(
        self, url: str, params: dict[str, Any] | None = None
    ) -> str | None:
        """GET a text page; None on 404."""
        response = await self._send(url, params)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return response.text


def signal_strength(count: int, expected: int) -> float:
    """Fraction of the expected signals that were found, capped at 1."""
    if expected <= 0:
        return 0.0
    return min(count / expected, 1.0)
