# tests/unit/gate/test_safe_write.py — v1
"""Tests for gate/safe_write.py — refusal rules and writer contract."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from signalgate.classification.models import (
    AgeRatingResult,
    ClassificationResult,
    GenreResult,
    MovieRecord,
)
from signalgate.gate.safe_write import (
    BaseEntityWriter,
    InMemoryEntityWriter,
    SafeWriteGate,
    permitted_fields,
    validate_classification,
)


def _result(
    genre: str | None = "Drama",
    genre_confidence: str = "high",
    rating: str | None = "U/A",
    rating_confidence: str = "medium",
    needs_review: bool = False,
) -> ClassificationResult:
    return ClassificationResult(
        movie_id="m-001",
        title="Jersey",
        genre=GenreResult(
            primary_genre=genre, confidence=genre_confidence, sources=["genres_array_primary"]
        ),
        age_rating=AgeRatingResult(
            age_rating=rating, confidence=rating_confidence, reasons=["Default safe middle ground → U/A"]
        ),
        needs_manual_review=needs_review,
    )


class TestValidateClassification:
    def test_fresh_record_is_valid(self):
        decision = validate_classification(MovieRecord(id="m-001"), _result())
        assert decision.valid
        assert decision.issues == []

    def test_low_confidence_cannot_replace_genre(self):
        movie = MovieRecord(id="m-001", primary_genre="Action")
        decision = validate_classification(movie, _result(genre_confidence="low"))
        assert not decision.valid
        assert decision.issues == ['Would overwrite existing genre "Action" with low confidence']

    def test_low_confidence_may_fill_empty_genre(self):
        decision = validate_classification(
            MovieRecord(id="m-001"), _result(genre_confidence="low")
        )
        assert decision.valid

    def test_downgrade_refused(self):
        movie = MovieRecord(id="m-001", age_rating="A")
        decision = validate_classification(movie, _result(rating="U"))
        assert decision.issues == ['Would downgrade age rating from "A" to "U"']

    def test_upgrade_allowed(self):
        movie = MovieRecord(id="m-001", age_rating="U")
        assert validate_classification(movie, _result(rating="A")).valid

    @pytest.mark.parametrize(("stored", "new"), [("18+", "U/A"), ("UA", "U"), ("ua 13+", "U")])
    def test_downgrade_refused_for_alias_spellings(self, stored, new):
        movie = MovieRecord(id="m-001", age_rating=stored)
        decision = validate_classification(movie, _result(rating=new))
        assert decision.issues == [f'Would downgrade age rating from "{stored}" to "{new}"']

    def test_alias_spelling_upgrade_allowed(self):
        movie = MovieRecord(id="m-001", age_rating="UA")
        assert validate_classification(movie, _result(rating="A")).valid

    def test_unrecognised_stored_rating_refused(self):
        movie = MovieRecord(id="m-001", age_rating="PG-13")
        decision = validate_classification(movie, _result(rating="S"))
        assert not decision.valid
        assert decision.issues == ['Stored age rating "PG-13" is not recognised']

    def test_both_issues_reported(self):
        movie = MovieRecord(id="m-001", primary_genre="Action", age_rating="S")
        decision = validate_classification(movie, _result(genre_confidence="low", rating="A"))
        assert len(decision.issues) == 2


class TestPermittedFields:
    def test_all_fields(self):
        fields = permitted_fields(MovieRecord(id="m-001"), _result(needs_review=True))
        assert fields == {
            "primary_genre": "Drama",
            "genre_confidence": "high",
            "genre_sources": ["genres_array_primary"],
            "age_rating": "U/A",
            "age_rating_confidence": "medium",
            "age_rating_reasons": ["Default safe middle ground → U/A"],
            "needs_manual_review": True,
        }

    def test_empty_values_not_written(self):
        assert permitted_fields(MovieRecord(id="m-001"), _result(genre=None, rating=None)) == {}

    def test_equal_rating_rewritten(self):
        fields = permitted_fields(MovieRecord(id="m-001", age_rating="U/A"), _result())
        assert fields["age_rating"] == "U/A"

    def test_unrecognised_stored_rating_not_overwritten(self):
        fields = permitted_fields(MovieRecord(id="m-001", age_rating="R"), _result())
        assert "age_rating" not in fields
        assert fields["primary_genre"] == "Drama"


class TestSafeWriteGate:
    @pytest.mark.asyncio
    async def test_commit_writes_permitted_fields(self):
        writer = InMemoryEntityWriter()
        decision = await SafeWriteGate(writer).commit(MovieRecord(id="m-001"), _result())
        assert decision.valid
        assert writer.calls == 1
        assert writer.records["m-001"]["primary_genre"] == "Drama"
        assert decision.written == writer.records["m-001"]

    @pytest.mark.asyncio
    async def test_refusal_never_reaches_writer(self, caplog):
        writer = AsyncMock(spec=BaseEntityWriter)
        movie = MovieRecord(id="m-001", age_rating="A")
        decision = await SafeWriteGate(writer).commit(movie, _result(rating="U"))
        assert not decision.valid
        assert decision.written == {}
        writer.update.assert_not_awaited()
        assert "Refused write for m-001" in caplog.text

    @pytest.mark.asyncio
    async def test_nothing_to_write(self):
        writer = InMemoryEntityWriter()
        decision = await SafeWriteGate(writer).commit(
            MovieRecord(id="m-001"), _result(genre=None, rating=None)
        )
        assert decision.valid
        assert writer.calls == 0

    @pytest.mark.asyncio
    async def test_updates_merge(self):
        writer = InMemoryEntityWriter()
        await writer.update("m", {"a": 1})
        await writer.update("m", {"b": 2})
        assert writer.records == {"m": {"a": 1, "b": 2}}
