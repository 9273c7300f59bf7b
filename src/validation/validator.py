# src/validation/validator.py — v1
"""Field rules plus comparison-adjusted confidence.

Comparison sources never overwrite stored values; they only move the
confidence and add issues for a reviewer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field

from signalgate.classification.models import MovieRecord
from signalgate.core.models import AggregatedComparison, utc_now

IssueSeverity = Literal["critical", "high", "medium", "low"]

MAX_CONFIDENCE_BONUS = 0.15
MAX_CONFIDENCE_PENALTY = 0.2


class ValidationIssue(BaseModel):
    field: str
    severity: IssueSeverity
    message: str
    current_value: Any = None
    auto_fixable: bool = False


class ValidationReport(BaseModel):
    movie_id: str
    movie_title: str
    overall_score: float
    issues: list[ValidationIssue] = Field(default_factory=list)
    confidence_adjustment: float = 0.0
    final_confidence: float = 0.0
    comparison: AggregatedComparison | None = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())

    @property
    def has_critical(self) -> bool:
        return any(i.severity == "critical" for i in self.issues)


@dataclass(frozen=True)
class ValidationRule:
    """A named predicate over one field of a record."""

    name: str
    field: str
    check: Callable[[Any], bool]
    severity: IssueSeverity
    message: Callable[[Any], str]


def _year_reasonable(value: Any) -> bool:
    try:
        year = int(value)
    except (TypeError, ValueError):
        return False
    return 1930 <= year <= date.today().year + 2


def _runtime_reasonable(value: Any) -> bool:
    if value is None:
        return True
    try:
        runtime = float(value)
    except (TypeError, ValueError):
        return False
    return 30 <= runtime <= 300


DEFAULT_RULES: list[ValidationRule] = [
    ValidationRule(
        name="year_reasonable",
        field="release_year",
        check=_year_reasonable,
        severity="critical",
        message=lambda v: (
            f"Release year {v} is outside reasonable range "
            f"(1930-{date.today().year + 2})"
        ),
    ),
    ValidationRule(
        name="title_not_empty",
        field="title_en",
        check=lambda v: isinstance(v, str) and bool(v.strip()),
        severity="critical",
        message=lambda v: "Title cannot be empty",
    ),
    ValidationRule(
        name="runtime_reasonable",
        field="runtime_minutes",
        check=_runtime_reasonable,
        severity="medium",
        message=lambda v: f"Runtime {v} minutes is outside reasonable range (30-300)",
    ),
    ValidationRule(
        name="director_not_unknown",
        field="director",
        check=lambda v: v not in ("Unknown", "TBD"),
        severity="low",
        message=lambda v: 'Director should not be "Unknown"',
    ),
]


class RuleValidator:
    """Runs field rules against a record."""

    def __init__(self, rules: Sequence[ValidationRule] | None = None) -> None:
        self._rules = list(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> list[ValidationRule]:
        return list(self._rules)

    def check(self, movie: MovieRecord) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for rule in self._rules:
            value = getattr(movie, rule.field, None)
            if not rule.check(value):
                issues.append(ValidationIssue(
                    field=rule.field,
                    severity=rule.severity,
                    message=rule.message(value),
                    current_value=value,
                ))
        return issues

    def validate(self, movie: MovieRecord) -> ValidationReport:
        """Score is the share of rules that pass."""
        issues = self.check(movie)
        score = 1.0 if not self._rules else 1 - len(issues) / len(self._rules)
        score = round(score, 4)
        return ValidationReport(
            movie_id=movie.id,
            movie_title=movie.title_en,
            overall_score=score,
            issues=issues,
            final_confidence=score,
        )


def calculate_adjusted_confidence(
    base_confidence: float, aggregated: AggregatedComparison
) -> float:
    """Move a confidence by cross-source alignment and conflicts.

    +0.10 at alignment >= 0.8, +0.05 at >= 0.6; -0.10 per high and -0.05 per
    medium conflict. The adjustment is clamped to [-0.2, 0.15] and the result
    to [0, 1].
    """
    adjustment = 0.0
    if aggregated.alignment_score >= 0.8:
        adjustment += 0.10
    elif aggregated.alignment_score >= 0.6:
        adjustment += 0.05

    for conflict in aggregated.conflicts:
        if conflict.severity == "high":
            adjustment -= 0.10
        elif conflict.severity == "medium":
            adjustment -= 0.05

    adjustment = max(-MAX_CONFIDENCE_PENALTY, min(MAX_CONFIDENCE_BONUS, adjustment))
    return round(max(0.0, min(1.0, base_confidence + adjustment)), 4)


def validate_with_comparison(
    movie: MovieRecord,
    aggregated: AggregatedComparison | None,
    base_confidence: float | None = None,
    validator: RuleValidator | None = None,
) -> ValidationReport:
    """Rule validation extended with a comparison aggregation.

    Args:
        movie: Stored record.
        aggregated: Result of ComparisonOrchestrator.compare, or None when
            comparison is off or unavailable.
        base_confidence: Starting confidence (default: the rule score).
        validator: Rule set (default rules when omitted).

    Returns:
        ValidationReport with conflict issues and the adjusted confidence.
    """
    report = (validator or RuleValidator()).validate(movie)
    base = report.overall_score if base_confidence is None else base_confidence
    report.final_confidence = base
    if aggregated is None:
        return report

    report.comparison = aggregated
    report.confidence_adjustment = aggregated.confidence_adjustment
    report.final_confidence = round(
        max(0.0, min(1.0, base + aggregated.confidence_adjustment)), 4
    )

    for conflict in aggregated.conflicts:
        report.issues.append(ValidationIssue(
            field=conflict.field,
            severity=conflict.severity,
            message=(
                f"Comparison conflict: {', '.join(conflict.sources)} "
                f"disagree on {conflict.field}"
            ),
            current_value=next(iter(conflict.values.values()), None),
        ))

    if aggregated.needs_manual_review:
        report.issues.append(ValidationIssue(
            field="_comparison",
            severity="medium",
            message=f"Manual review recommended: {aggregated.review_reason}",
        ))
    return report
