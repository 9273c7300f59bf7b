# src/classification/models.py — v1
"""Classification input and result models.

MovieRecord is the read-only view of a stored entity that classification,
anomaly checks and the write gate all consume.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from signalgate.core.models import ComparisonQuery

AgeRating = Literal["U", "U/A", "A", "S"]
GenreConfidence = Literal["high", "low"]
RatingConfidence = Literal["high", "medium", "low"]


class MovieRecord(BaseModel):
    """Entity fields used for classification, validation and anomaly checks."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title_en: str = ""
    title_te: str | None = None
    tmdb_id: int | None = None
    imdb_id: str | None = None
    release_year: int | None = None
    slug: str | None = None
    genres: list[str] | None = None
    mood_tags: list[str] | None = None
    audience_fit: dict[str, bool] | None = None
    hero: str | None = None
    heroine: str | None = None
    director: str | None = None
    cast: list[str] | None = None
    content_flags: dict[str, Any] | None = None
    trigger_warnings: list[str] | None = None
    overview: str | None = None
    synopsis: str | None = None
    runtime_minutes: float | None = None
    avg_rating: float | None = None

    # Stored values a write must not downgrade.
    primary_genre: str | None = None
    age_rating: str | None = None


class Vote(BaseModel):
    """One weighted vote for a candidate value."""

    model_config = ConfigDict(frozen=True)

    candidate: str
    source: str
    weight: float = Field(ge=0.0)


class ConsensusResult(BaseModel):
    winner: str | None = None
    confidence: GenreConfidence = "low"
    weight: float = 0.0
    sources: list[str] = Field(default_factory=list)
    votes: list[Vote] = Field(default_factory=list)
    ambiguous: bool = False
    reason: str | None = None


class GenreResult(BaseModel):
    primary_genre: str | None = None
    confidence: GenreConfidence = "low"
    sources: list[str] = Field(default_factory=list)
    signals: list[Vote] = Field(default_factory=list)
    ambiguous: bool = False
    ambiguity_reason: str | None = None


class AgeRatingResult(BaseModel):
    age_rating: AgeRating | None = None
    confidence: RatingConfidence = "low"
    reasons: list[str] = Field(default_factory=list)
    content_indicators: list[str] = Field(default_factory=list)
    skipped: bool = False
    skip_reason: str | None = None


class ClassificationResult(BaseModel):
    movie_id: str
    title: str
    genre: GenreResult
    age_rating: AgeRatingResult
    needs_manual_review: bool = False
    review_reasons: list[str] = Field(default_factory=list)


def comparison_query(movie: MovieRecord, language: str = "Telugu") -> ComparisonQuery:
    """Build the cross-source lookup for a stored record."""
    return ComparisonQuery(
        title_en=movie.title_en,
        release_year=movie.release_year or 0,
        tmdb_id=movie.tmdb_id,
        imdb_id=movie.imdb_id,
        title_te=movie.title_te,
        director=movie.director,
        hero=movie.hero,
        language=language,
        genres=list(movie.genres or []),
    )
