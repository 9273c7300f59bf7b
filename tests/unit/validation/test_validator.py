# tests/unit/validation/test_validator.py — v1
"""Tests for validation/validator.py — field rules and comparison confidence."""

from __future__ import annotations

import pytest

from signalgate.classification.models import MovieRecord
from signalgate.core.models import AggregatedComparison, Conflict
from signalgate.validation.validator import (
    DEFAULT_RULES,
    RuleValidator,
    ValidationRule,
    calculate_adjusted_confidence,
    validate_with_comparison,
)


def _aggregated(**overrides) -> AggregatedComparison:
    defaults = dict(movie_id="m-001", sources_attempted=3, sources_succeeded=3)
    defaults.update(overrides)
    return AggregatedComparison(**defaults)


def _rating_conflict(severity: str = "high") -> Conflict:
    return Conflict(
        field="rating", sources=["imdb", "rotten_tomatoes"],
        values={"imdb": 40.0, "rotten_tomatoes": 85.0}, severity=severity,
    )


class TestRuleValidator:
    def test_clean_record(self, sample_movie):
        report = RuleValidator().validate(sample_movie)
        assert report.overall_score == 1.0
        assert report.issues == []
        assert report.final_confidence == 1.0
        assert report.movie_title == "Jersey"

    def test_every_rule_fails(self):
        movie = MovieRecord(
            id="m", title_en=" ", release_year=1920, runtime_minutes=20, director="Unknown"
        )
        report = RuleValidator().validate(movie)
        assert [i.field for i in report.issues] == [
            "release_year", "title_en", "runtime_minutes", "director"
        ]
        assert report.overall_score == 0.0
        assert report.has_critical
        assert report.issues[2].message == (
            "Runtime 20.0 minutes is outside reasonable range (30-300)"
        )

    def test_missing_optional_fields_pass(self):
        report = RuleValidator().validate(MovieRecord(id="m", title_en="Eega", release_year=2012))
        assert report.issues == []

    def test_missing_year_is_critical(self):
        issues = RuleValidator().check(MovieRecord(id="m", title_en="Eega"))
        assert len(issues) == 1
        assert issues[0].severity == "critical"
        assert issues[0].current_value is None

    def test_partial_score(self):
        report = RuleValidator().validate(
            MovieRecord(id="m", title_en="Eega", release_year=2012, director="TBD")
        )
        assert report.overall_score == 0.75
        assert not report.has_critical

    def test_custom_rules(self):
        rule = ValidationRule(
            name="has_hero", field="hero", check=bool, severity="high",
            message=lambda v: "Hero is missing",
        )
        validator = RuleValidator([rule])
        assert validator.rules == [rule]
        report = validator.validate(MovieRecord(id="m"))
        assert [i.message for i in report.issues] == ["Hero is missing"]

    def test_empty_rule_set(self):
        assert RuleValidator([]).validate(MovieRecord(id="m")).overall_score == 1.0

    def test_default_rule_names(self):
        assert [r.name for r in DEFAULT_RULES] == [
            "year_reasonable", "title_not_empty", "runtime_reasonable", "director_not_unknown"
        ]


class TestAdjustedConfidence:
    @pytest.mark.parametrize(
        ("alignment", "conflicts", "expected"),
        [
            (0.9, [], 0.8),
            (0.7, [], 0.75),
            (0.5, [], 0.7),
            (0.9, ["high"], 0.7),
            (0.5, ["medium"], 0.65),
            (0.5, ["high", "high", "high"], 0.5),
            (0.5, ["low"], 0.7),
        ],
    )
    def test_adjustment(self, alignment, conflicts, expected):
        aggregated = _aggregated(
            alignment_score=alignment, conflicts=[_rating_conflict(s) for s in conflicts]
        )
        assert calculate_adjusted_confidence(0.7, aggregated) == pytest.approx(expected)

    def test_clamped_to_unit_range(self):
        assert calculate_adjusted_confidence(0.95, _aggregated(alignment_score=1.0)) == 1.0
        aggregated = _aggregated(conflicts=[_rating_conflict()] * 2)
        assert calculate_adjusted_confidence(0.1, aggregated) == 0.0


class TestValidateWithComparison:
    def test_without_comparison(self, sample_movie):
        report = validate_with_comparison(sample_movie, None, base_confidence=0.6)
        assert report.final_confidence == 0.6
        assert report.comparison is None

    def test_conflicts_become_issues(self, sample_movie):
        aggregated = _aggregated(
            conflicts=[_rating_conflict()], alignment_score=0.5,
            confidence_adjustment=-0.1, needs_manual_review=True,
            review_reason="High rating conflict",
        )
        report = validate_with_comparison(sample_movie, aggregated)
        assert report.final_confidence == pytest.approx(0.9)
        assert report.confidence_adjustment == -0.1
        assert report.comparison is aggregated
        assert [i.message for i in report.issues] == [
            "Comparison conflict: imdb, rotten_tomatoes disagree on rating",
            "Manual review recommended: High rating conflict",
        ]
        assert report.issues[0].severity == "high"
        assert report.issues[0].current_value == 40.0
        assert report.issues[1].field == "_comparison"

    def test_bonus_with_base_confidence(self, sample_movie):
        aggregated = _aggregated(alignment_score=1.0, confidence_adjustment=0.15)
        report = validate_with_comparison(sample_movie, aggregated, base_confidence=0.5)
        assert report.final_confidence == pytest.approx(0.65)
        assert report.issues == []

    def test_stored_values_untouched(self, sample_movie):
        before = sample_movie.model_dump()
        validate_with_comparison(sample_movie, _aggregated(conflicts=[_rating_conflict()]))
        assert sample_movie.model_dump() == before
