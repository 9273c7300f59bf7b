# src/core/models.py — v1
"""Shared Pydantic domain models for comparison sources.

Signals, source configuration, per-source comparison results and their
aggregation. Models produced by a fetch are frozen; nothing downstream
mutates them.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import IntEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# === SOURCE TIERS ===


class SourceTier(IntEnum):
    """Trust ranking of a source. Lower value = more trusted."""

    PRIMARY = 1
    AGGREGATOR = 2
    COMMUNITY = 3
    SIGNAL = 4


TIER_WEIGHTS: dict[SourceTier, float] = {
    SourceTier.PRIMARY: 1.0,
    SourceTier.AGGREGATOR: 0.7,
    SourceTier.COMMUNITY: 0.5,
    SourceTier.SIGNAL: 0.3,
}

BucketLabel = Literal["very_low", "low", "medium", "high", "very_high"]
Severity = Literal["low", "medium", "high"]
ErrorKind = Literal["disabled", "config", "not_found", "fetch"]


# === SIGNALS ===


class _SignalBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class NumericSignal(_SignalBase):
    """Numeric observation normalized to 0-100."""

    type: Literal["numeric"] = "numeric"
    value: float = Field(ge=0.0, le=100.0)
    raw_value: float = Field(alias="rawValue")
    scale: str


class BooleanSignal(_SignalBase):
    type: Literal["boolean"] = "boolean"
    value: bool


class CategoricalSignal(_SignalBase):
    """One value out of a closed set."""

    type: Literal["categorical"] = "categorical"
    value: str
    allowed_values: list[str] = Field(alias="allowedValues")

    @model_validator(mode="after")
    def _value_in_allowed(self) -> CategoricalSignal:
        if self.allowed_values and self.value not in self.allowed_values:
            raise ValueError(
                f"categorical value {self.value!r} not in {self.allowed_values}"
            )
        return self


class BucketSignal(_SignalBase):
    """Ordinal label with a 0-100 numeric equivalent."""

    type: Literal["bucket"] = "bucket"
    value: BucketLabel
    numeric_equivalent: float = Field(alias="numericEquivalent", ge=0.0, le=100.0)


Signal = Annotated[
    Union[NumericSignal, BooleanSignal, CategoricalSignal, BucketSignal],
    Field(discriminator="type"),
]


def signal_numeric_value(signal: Signal) -> float | None:
    """Return the 0-100 value of a signal, or None for categorical signals."""
    if isinstance(signal, NumericSignal):
        return signal.value
    if isinstance(signal, BucketSignal):
        return signal.numeric_equivalent
    if isinstance(signal, BooleanSignal):
        return 100.0 if signal.value else 0.0
    if isinstance(signal, CategoricalSignal):
        return None
    raise TypeError(f"Unknown signal type: {type(signal).__name__}")


def signal_display_value(signal: Signal) -> str | float | bool:
    """Return the raw value a signal carries, for audit records."""
    if isinstance(signal, NumericSignal):
        return signal.raw_value
    if isinstance(signal, (BooleanSignal, CategoricalSignal, BucketSignal)):
        return signal.value
    raise TypeError(f"Unknown signal type: {type(signal).__name__}")


# === SOURCE CONFIGURATION ===


class SourceConfig(BaseModel):
    """Static description of one comparison source. Read-only after startup."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    tier: SourceTier
    rate_limit_per_minute: float = Field(gt=0)
    cache_days: int = Field(ge=0)
    enabled: bool = True
    feature_flag_key: str
    requires_api_key: bool = False
    base_url: str = ""

    @property
    def tier_weight(self) -> float:
        return TIER_WEIGHTS[self.tier]

    @property
    def min_delay_s(self) -> float:
        """Minimum spacing between requests, with a 20% safety margin."""
        return math.ceil(60.0 / self.rate_limit_per_minute * 1000 * 1.2) / 1000.0

    @property
    def cache_ttl_s(self) -> float:
        return self.cache_days * 24 * 60 * 60


# === QUERY ===


class ComparisonQuery(BaseModel):
    """What an adapter is asked to look up."""

    model_config = ConfigDict(frozen=True)

    title_en: str
    release_year: int
    tmdb_id: int | None = None
    imdb_id: str | None = None
    title_te: str | None = None
    director: str | None = None
    hero: str | None = None
    language: str | None = None
    country: str | None = None
    genres: list[str] = Field(default_factory=list)

    @property
    def movie_id(self) -> str:
        """Stable cache key for the entity this query targets."""
        if self.tmdb_id is not None:
            return f"tmdb:{self.tmdb_id}"
        if self.imdb_id:
            return f"imdb:{self.imdb_id}"
        return f"title:{self.title_en}:{self.release_year}"


# === RESULTS ===


class ComparisonResult(BaseModel):
    """One adapter's answer for one query. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    source_tier: SourceTier
    success: bool
    signals: dict[str, Signal] = Field(default_factory=dict)
    signal_strength: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence_weight: float = Field(default=0.0, ge=0.0, le=1.0)
    fetched_at: datetime = Field(default_factory=utc_now)
    from_cache: bool = False
    error: str | None = None
    error_details: str | None = None
    error_kind: ErrorKind | None = None

    def with_cache_flag(self) -> ComparisonResult:
        """Copy of this result marked as served from cache."""
        return self.model_copy(update={"from_cache": True})


class Conflict(BaseModel):
    """Sources disagreeing about one field."""

    model_config = ConfigDict(frozen=True)

    field: str
    sources: list[str]
    values: dict[str, float] = Field(default_factory=dict)
    severity: Severity


class AggregatedComparison(BaseModel):
    """All comparison results for one entity, plus what they add up to.

    Recomputed on every fetch; persisted only as an audit trail.
    """

    movie_id: str
    results: list[ComparisonResult] = Field(default_factory=list)
    sources_attempted: int = 0
    sources_succeeded: int = 0
    conflicts: list[Conflict] = Field(default_factory=list)
    alignment_score: float = 0.0
    confidence_adjustment: float = Field(default=0.0, ge=-0.2, le=0.2)
    needs_manual_review: bool = False
    review_reason: str | None = None
    computed_at: datetime = Field(default_factory=utc_now)

    @property
    def signals_by_source(self) -> dict[str, dict[str, Signal]]:
        """Signals of every successful result, keyed by source id."""
        return {r.source_id: dict(r.signals) for r in self.results if r.success}
