# src/gate/safe_write.py — v1
"""Safe-write gate: the only path from a classification to stored state.

A write is refused when it would replace a stored genre with a
low-confidence one or lower a stored age rating. A stored rating that does
not normalise to U, U/A, A or S also refuses the write. Refusals are
data (GateDecision), never exceptions.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from signalgate.classification.age_rating import normalize_age_rating, rating_rank
from signalgate.classification.models import ClassificationResult, MovieRecord

logger = logging.getLogger(__name__)


class GateDecision(BaseModel):
    movie_id: str
    valid: bool
    issues: list[str] = Field(default_factory=list)
    written: dict[str, Any] = Field(default_factory=dict)


def validate_classification(
    movie: MovieRecord, result: ClassificationResult
) -> GateDecision:
    """Check a classification against the stored record. Never raises."""
    issues: list[str] = []

    if (
        movie.primary_genre
        and result.genre.primary_genre
        and result.genre.confidence == "low"
    ):
        issues.append(
            f'Would overwrite existing genre "{movie.primary_genre}" with low confidence'
        )

    new_rating = result.age_rating.age_rating
    if movie.age_rating and new_rating:
        stored = normalize_age_rating(movie.age_rating)
        if stored is None:
            issues.append(f'Stored age rating "{movie.age_rating}" is not recognised')
        elif rating_rank(new_rating) < rating_rank(stored):
            issues.append(
                f'Would downgrade age rating from "{movie.age_rating}" to "{new_rating}"'
            )

    return GateDecision(movie_id=movie.id, valid=not issues, issues=issues)


def permitted_fields(
    movie: MovieRecord, result: ClassificationResult
) -> dict[str, Any]:
    """Fields a valid classification may write. Empty values are never written."""
    fields: dict[str, Any] = {}
    genre = result.genre
    if genre.primary_genre:
        fields["primary_genre"] = genre.primary_genre
        fields["genre_confidence"] = genre.confidence
        fields["genre_sources"] = list(genre.sources)
    rating = result.age_rating
    stored = normalize_age_rating(movie.age_rating)
    if rating.age_rating and (
        not movie.age_rating
        or (stored is not None and rating_rank(rating.age_rating) >= rating_rank(stored))
    ):
        fields["age_rating"] = rating.age_rating
        fields["age_rating_confidence"] = rating.confidence
        fields["age_rating_reasons"] = list(rating.reasons)
    if fields:
        fields["needs_manual_review"] = result.needs_manual_review
    return fields


# --- Writers ---


class BaseEntityWriter(ABC):
    """Persistence boundary for classified entity fields."""

    @abstractmethod
    async def update(self, movie_id: str, fields: dict[str, Any]) -> None:
        """Apply a partial update to one stored entity."""


class InMemoryEntityWriter(BaseEntityWriter):
    """Keeps updates in a dict. Used for dry runs and tests."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.calls = 0

    async def update(self, movie_id: str, fields: dict[str, Any]) -> None:
        self.calls += 1
        self.records.setdefault(movie_id, {}).update(fields)


class SafeWriteGate:
    """Validates classifications and writes only what passes."""

    def __init__(self, writer: BaseEntityWriter) -> None:
        self._writer = writer

    async def commit(
        self, movie: MovieRecord, result: ClassificationResult
    ) -> GateDecision:
        """Validate, then write the permitted fields if valid.

        Returns:
            The GateDecision, with ``written`` holding the fields sent to the writer.
        """
        decision = validate_classification(movie, result)
        if not decision.valid:
            logger.warning(
                "Refused write for %s: %s", movie.id, "; ".join(decision.issues)
            )
            return decision

        fields = permitted_fields(movie, result)
        if not fields:
            logger.debug("Nothing to write for %s", movie.id)
            return decision

        await self._writer.update(movie.id, fields)
        logger.info("Wrote %s for %s", ", ".join(sorted(fields)), movie.id)
        return decision.model_copy(update={"written": fields})
