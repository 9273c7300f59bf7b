# src/checkpoint/models.py — v1
"""Pipeline stage table and per-movie checkpoint models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Stage = Literal[
    "discovery",
    "validation",
    "enrichment",
    "media",
    "tagging",
    "review",
    "orphan_resolution",
    "normalize",
    "dedupe",
    "finalize",
]
Status = Literal["raw", "partial", "enriched", "verified", "published"]

STAGE_ORDER: list[Stage] = [
    "discovery",
    "validation",
    "enrichment",
    "media",
    "tagging",
    "review",
    "orphan_resolution",
    "normalize",
    "dedupe",
    "finalize",
]

STAGE_SCORES: dict[Stage, float] = {
    "discovery": 0.10,
    "validation": 0.20,
    "enrichment": 0.40,
    "media": 0.50,
    "tagging": 0.55,
    "review": 0.65,
    "orphan_resolution": 0.70,
    "normalize": 0.75,
    "dedupe": 0.85,
    "finalize": 1.0,
}

STATUSES: list[Status] = ["raw", "partial", "enriched", "verified", "published"]


def get_stage_score(stage: str) -> float:
    return STAGE_SCORES.get(stage, 0.0)  # type: ignore[call-overload]


def get_next_stage(stage: str) -> Stage | None:
    if stage not in STAGE_ORDER:
        return None
    index = STAGE_ORDER.index(stage)  # type: ignore[arg-type]
    return STAGE_ORDER[index + 1] if index + 1 < len(STAGE_ORDER) else None


def get_previous_stage(stage: str) -> Stage | None:
    if stage not in STAGE_ORDER:
        return None
    index = STAGE_ORDER.index(stage)  # type: ignore[arg-type]
    return STAGE_ORDER[index - 1] if index > 0 else None


def stages_through(stage: str) -> list[Stage]:
    """Every stage up to and including ``stage``, assuming linear progress."""
    if stage not in STAGE_ORDER:
        return []
    return STAGE_ORDER[: STAGE_ORDER.index(stage) + 1]  # type: ignore[arg-type]


def derive_status(completed: set[Stage]) -> Status:
    if "finalize" in completed:
        return "verified"
    if "review" in completed:
        return "enriched"
    if "enrichment" in completed:
        return "partial"
    return "raw"


def completeness(completed: set[Stage]) -> float:
    if not completed:
        return 0.0
    return round(max(get_stage_score(s) for s in completed), 2)


class MovieCheckpoint(BaseModel):
    """In-memory progress of one movie through the pipeline.

    Status and completeness are derived from ``completed_stages`` only.
    """

    movie_id: str
    completed_stages: set[Stage] = Field(default_factory=set)
    last_stage: Stage | None = None
    last_stage_at: datetime | None = None
    errors: list[str] = Field(default_factory=list)

    @property
    def status(self) -> Status:
        return derive_status(self.completed_stages)

    @property
    def completeness_score(self) -> float:
        return completeness(self.completed_stages)

    @property
    def ordered_stages(self) -> list[Stage]:
        return [s for s in STAGE_ORDER if s in self.completed_stages]

    def to_record(self) -> CheckpointRecord:
        return CheckpointRecord(
            movie_id=self.movie_id,
            status=self.status,
            completed_stages=self.ordered_stages,
            last_stage=self.last_stage,
            last_stage_at=self.last_stage_at,
            completeness_score=self.completeness_score,
            errors=list(self.errors),
        )

    @classmethod
    def from_record(cls, record: CheckpointRecord) -> MovieCheckpoint:
        """Rebuild from a persisted record.

        Records that only carry ``last_stage`` get the linear prefix up to it.
        """
        stages = set(record.completed_stages)
        if not stages and record.last_stage:
            stages = set(stages_through(record.last_stage))
        return cls(
            movie_id=record.movie_id,
            completed_stages=stages,
            last_stage=record.last_stage,
            last_stage_at=record.last_stage_at,
            errors=list(record.errors),
        )


class CheckpointRecord(BaseModel):
    """Persisted checkpoint shape."""

    movie_id: str
    status: Status = "raw"
    completed_stages: list[Stage] = Field(default_factory=list)
    last_stage: Stage | None = None
    last_stage_at: datetime | None = None
    completeness_score: float = 0.0
    errors: list[str] = Field(default_factory=list)


class CheckpointSummary(BaseModel):
    total: int = 0
    by_status: dict[Status, int] = Field(
        default_factory=lambda: {s: 0 for s in STATUSES}
    )
    by_last_stage: dict[Stage, int] = Field(
        default_factory=lambda: {s: 0 for s in STAGE_ORDER}
    )
    incomplete: int = 0
    average_completeness: float = 0.0
