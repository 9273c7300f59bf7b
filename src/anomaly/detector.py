# src/anomaly/detector.py — v1
"""Rule-based anomaly checks over a stored record.

Every check is a pure function returning a flag (or None). The record-level
runner gathers them and decides whether a human must look.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date
from typing import Any

from signalgate.anomaly.birth_years import BirthYearRegistry
from signalgate.anomaly.models import AnomalyCheckResult, AnomalyFlag
from signalgate.classification.models import MovieRecord
from signalgate.core.similarity import dice_similarity, set_overlap

logger = logging.getLogger(__name__)

MIN_ACTING_AGE = 16
YOUNG_ACTOR_AGE = 20
LOW_CONFIDENCE_THRESHOLD = 0.5
REQUIRED_FIELDS = ("title_en", "release_year", "slug")
PLAUSIBILITY_FIELDS = ("runtime_minutes", "release_year", "avg_rating")

_SLUG_YEAR_RE = re.compile(r"-(\d{4})$")
_DEFAULT_REGISTRY = BirthYearRegistry()


def check_actor_age(
    actor: str,
    movie_year: int,
    registry: BirthYearRegistry | None = None,
    min_acting_age: int = MIN_ACTING_AGE,
) -> AnomalyFlag | None:
    """Flag actors too young to have acted in a film of ``movie_year``.

    HIGH below the minimum acting age, LOW (borderline) below 20.
    Unknown actors are not flagged.
    """
    birth_year = (registry or _DEFAULT_REGISTRY).lookup(actor)
    if birth_year is None:
        return None

    age = movie_year - birth_year
    metadata = {
        "actor_name": actor,
        "birth_year": birth_year,
        "movie_year": movie_year,
        "age_at_release": age,
    }
    if age < min_acting_age:
        return AnomalyFlag(
            type="ACTOR_TOO_YOUNG",
            severity="HIGH",
            message=f"{actor} would have been {age} years old in {movie_year} (born {birth_year})",
            suggested_action="Verify release year or actor name for this movie",
            metadata=metadata,
        )
    if age < YOUNG_ACTOR_AGE:
        return AnomalyFlag(
            type="ACTOR_TOO_YOUNG",
            severity="LOW",
            message=f"{actor} would have been only {age} years old in {movie_year}",
            suggested_action="Consider if this was a debut or early career film",
            metadata=metadata,
        )
    return None


def check_year_slug_mismatch(slug: str, release_year: int) -> AnomalyFlag | None:
    """Flag a trailing ``-YYYY`` in the slug that disagrees with the release year."""
    match = _SLUG_YEAR_RE.search(slug)
    if not match:
        return None
    slug_year = int(match.group(1))
    if slug_year == release_year:
        return None
    return AnomalyFlag(
        type="YEAR_MISMATCH",
        severity="HIGH" if abs(slug_year - release_year) > 5 else "MEDIUM",
        message=f"Slug year ({slug_year}) doesn't match release year ({release_year})",
        suggested_action="Update slug to use correct year, or verify release year",
        auto_fixable=True,
        metadata={
            "slug": slug,
            "slug_year": slug_year,
            "release_year": release_year,
            "difference": abs(slug_year - release_year),
        },
    )


def _implausible(
    field: str, value: float, severity: str, message: str, action: str
) -> AnomalyFlag:
    return AnomalyFlag(
        type="DATA_IMPLAUSIBLE",
        severity=severity,  # type: ignore[arg-type]
        message=message,
        suggested_action=action,
        metadata={"field": field, "value": value},
    )


def check_data_plausibility(
    field: str, value: Any, today: date | None = None
) -> AnomalyFlag | None:
    """Range checks for runtime, release year and rating fields.

    Non-numeric values are not checked.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    shown = int(number) if number.is_integer() else number

    if field in ("runtime_minutes", "runtime"):
        if 0 < number < 30:
            return _implausible(
                field, number, "MEDIUM",
                f"Runtime of {shown} minutes is unusually short for a feature film",
                "Verify if this is a short film or if data is in wrong units",
            )
        if number > 300:
            return _implausible(
                field, number, "MEDIUM",
                f"Runtime of {shown} minutes is unusually long",
                "Verify this is not a multi-part film counted together",
            )
    elif field in ("release_year", "year"):
        if number < 1920:
            return _implausible(
                field, number, "HIGH",
                f"Release year {shown} predates Telugu cinema",
                "Verify release year - Telugu cinema started around 1930s",
            )
        if number > (today or date.today()).year + 1:
            return _implausible(
                field, number, "HIGH",
                f"Release year {shown} is in the future",
                "Mark as upcoming or fix the year",
            )
    elif field in ("avg_rating", "rating"):
        if number < 0 or number > 10:
            return _implausible(
                field, number, "HIGH",
                f"Rating {shown} is outside valid range (0-10)",
                "Fix rating value or check rating scale",
            )
    return None


def check_source_conflict(
    field: str,
    old_value: Any,
    new_value: Any,
    old_source: str,
    new_source: str,
) -> AnomalyFlag | None:
    """Flag a new value that differs materially from the stored one.

    Lists are compared by overlap, strings by bigram similarity.
    """
    if old_value is None or old_value == new_value:
        return None

    metadata: dict[str, Any] = {
        "field": field,
        "old_source": old_source,
        "new_source": new_source,
        "old_value": old_value,
        "new_value": new_value,
    }
    if isinstance(old_value, list) and isinstance(new_value, list):
        overlap = set_overlap(old_value, new_value)
        if overlap < 0.5:
            metadata["overlap_percentage"] = overlap * 100
            return AnomalyFlag(
                type="SOURCE_CONFLICT",
                severity="MEDIUM",
                message=f"{field}: Less than 50% overlap between {old_source} and {new_source} data",
                suggested_action="Manually review which source is more accurate",
                metadata=metadata,
            )
    elif isinstance(old_value, str) and isinstance(new_value, str):
        similarity = dice_similarity(old_value, new_value)
        if similarity < 0.7:
            metadata["similarity"] = similarity
            return AnomalyFlag(
                type="SOURCE_CONFLICT",
                severity="MEDIUM",
                message=f"{field}: Significant difference between {old_source} and {new_source}",
                suggested_action=f'Review conflicting values: "{old_value}" vs "{new_value}"',
                metadata=metadata,
            )
    return None


def check_low_confidence(
    field: str, confidence: float, threshold: float = LOW_CONFIDENCE_THRESHOLD
) -> AnomalyFlag | None:
    """HIGH below 0.3, MEDIUM below ``threshold``."""
    if confidence >= threshold:
        return None
    return AnomalyFlag(
        type="LOW_CONFIDENCE",
        severity="HIGH" if confidence < 0.3 else "MEDIUM",
        message=f"{field}: Confidence {confidence * 100:.0f}% is below threshold",
        suggested_action="Seek additional sources to verify this data",
        metadata={"field": field, "confidence": confidence, "threshold": threshold},
    )


def check_missing_required(
    data: dict[str, Any], fields: Iterable[str] = REQUIRED_FIELDS
) -> list[AnomalyFlag]:
    """One HIGH flag per required field that is missing or empty."""
    return [
        AnomalyFlag(
            type="MISSING_REQUIRED",
            severity="HIGH",
            message=f"Required field '{field}' is missing",
            suggested_action=f"Enrich {field} from available sources",
            metadata={"field": field},
        )
        for field in fields
        if data.get(field) in (None, "")
    ]


def run_all_anomaly_checks(
    movie: MovieRecord,
    registry: BirthYearRegistry | None = None,
    min_acting_age: int = MIN_ACTING_AGE,
) -> AnomalyCheckResult:
    """Run every record-level check.

    Borderline (LOW) actor-age flags are informational and left out.
    Review is needed when any flag is CRITICAL or HIGH.
    """
    anomalies: list[AnomalyFlag] = []
    year = movie.release_year

    if movie.slug and year:
        flag = check_year_slug_mismatch(movie.slug, year)
        if flag:
            anomalies.append(flag)

    if year:
        actors = [a for a in (movie.hero, movie.heroine, *(movie.cast or [])) if a]
        for actor in actors:
            flag = check_actor_age(actor, year, registry, min_acting_age)
            if flag and flag.severity != "LOW":
                anomalies.append(flag)

    for field in PLAUSIBILITY_FIELDS:
        value = getattr(movie, field)
        if value is not None:
            flag = check_data_plausibility(field, value)
            if flag:
                anomalies.append(flag)

    anomalies.extend(check_missing_required(movie.model_dump(), REQUIRED_FIELDS))

    needs_review = any(a.blocking for a in anomalies)
    if anomalies:
        logger.info(
            "%s: %d anomal%s found", movie.id, len(anomalies),
            "y" if len(anomalies) == 1 else "ies",
        )
    return AnomalyCheckResult(
        movie_id=movie.id,
        anomalies=anomalies,
        needs_review=needs_review,
        review_reasons=[a.message for a in anomalies],
    )
