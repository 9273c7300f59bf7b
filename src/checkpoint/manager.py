# src/checkpoint/manager.py — v1
"""Per-movie stage tracking for resumable pipeline runs.

The in-memory map is the source of truth for the running process. Each mark
is also pushed to the store, best effort: a failed write is logged and the
run continues, so stage handlers must tolerate being re-run after a restart.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from signalgate.checkpoint.base_store import BaseCheckpointStore
from signalgate.checkpoint.models import (
    STAGE_ORDER,
    CheckpointSummary,
    MovieCheckpoint,
    Stage,
    Status,
    get_previous_stage,
)
from signalgate.core.errors import CheckpointStoreError
from signalgate.core.models import utc_now

logger = logging.getLogger(__name__)


class CheckpointManager:
    """Tracks which pipeline stages each movie has completed.

    Args:
        store: Persistence backend. None keeps checkpoints in memory only.
    """

    def __init__(self, store: BaseCheckpointStore | None = None) -> None:
        self._store = store
        self._checkpoints: dict[str, MovieCheckpoint] = {}

    @property
    def store(self) -> BaseCheckpointStore | None:
        return self._store

    def __len__(self) -> int:
        return len(self._checkpoints)

    # --- Stage tracking ---

    async def mark_stage_complete(
        self, movie_id: str, stage: Stage, error: str | None = None
    ) -> MovieCheckpoint:
        """Record ``stage`` as done for a movie. Re-marking is harmless.

        Args:
            movie_id: Movie being tracked.
            stage: Completed stage.
            error: Optional non-fatal error to keep with the checkpoint.

        Returns:
            The updated checkpoint.
        """
        if stage not in STAGE_ORDER:
            raise ValueError(f"Unknown stage: {stage!r}")
        checkpoint = self._get_or_create(movie_id)
        checkpoint.completed_stages.add(stage)
        checkpoint.last_stage = stage
        checkpoint.last_stage_at = utc_now()
        if error:
            checkpoint.errors.append(f"{stage}: {error}")

        await self._persist(checkpoint)
        return checkpoint

    async def mark_batch_stage_complete(
        self, movie_ids: Iterable[str], stage: Stage
    ) -> None:
        for movie_id in movie_ids:
            await self.mark_stage_complete(movie_id, stage)

    def has_completed_stage(self, movie_id: str, stage: Stage) -> bool:
        checkpoint = self._checkpoints.get(movie_id)
        return checkpoint is not None and stage in checkpoint.completed_stages

    def get_last_completed_stage(self, movie_id: str) -> Stage | None:
        checkpoint = self._checkpoints.get(movie_id)
        return checkpoint.last_stage if checkpoint else None

    def get_completed_stages(self, movie_id: str) -> list[Stage]:
        """Completed stages in pipeline order."""
        checkpoint = self._checkpoints.get(movie_id)
        return checkpoint.ordered_stages if checkpoint else []

    # --- Queries ---

    def get_incomplete_movies(
        self, stage: Stage, movie_ids: Iterable[str] | None = None
    ) -> list[str]:
        """Movies (tracked, or the given ids) that have not completed ``stage``."""
        candidates = list(movie_ids) if movie_ids is not None else list(self._checkpoints)
        return [m for m in candidates if not self.has_completed_stage(m, stage)]

    def get_movies_by_status(self, status: Status) -> list[str]:
        return [m for m, c in self._checkpoints.items() if c.status == status]

    def get_movies_to_resume_from(self, stage: Stage) -> list[str]:
        """Tracked movies that finished the previous stage but not ``stage``.

        For the first stage, every tracked movie missing it.
        """
        if stage not in STAGE_ORDER:
            return []
        previous = get_previous_stage(stage)
        return [
            movie_id
            for movie_id, c in self._checkpoints.items()
            if stage not in c.completed_stages
            and (previous is None or previous in c.completed_stages)
        ]

    def get_checkpoint(self, movie_id: str) -> MovieCheckpoint | None:
        return self._checkpoints.get(movie_id)

    def get_completeness_score(self, movie_id: str) -> float:
        checkpoint = self._checkpoints.get(movie_id)
        return checkpoint.completeness_score if checkpoint else 0.0

    def get_summary(self) -> CheckpointSummary:
        summary = CheckpointSummary(total=len(self._checkpoints))
        total_completeness = 0.0
        for checkpoint in self._checkpoints.values():
            status = checkpoint.status
            summary.by_status[status] += 1
            if checkpoint.last_stage:
                summary.by_last_stage[checkpoint.last_stage] += 1
            total_completeness += checkpoint.completeness_score
            if status not in ("verified", "published"):
                summary.incomplete += 1
        if self._checkpoints:
            summary.average_completeness = round(
                total_completeness / len(self._checkpoints), 2
            )
        return summary

    # --- Management ---

    def clear_checkpoints(self, movie_ids: Iterable[str]) -> None:
        """Forget movies in memory. Stored records are left alone."""
        for movie_id in movie_ids:
            self._checkpoints.pop(movie_id, None)

    def clear_all(self) -> None:
        self._checkpoints.clear()

    def initialize_movies(self, movie_ids: Iterable[str]) -> None:
        """Start tracking movies with no completed stages; known ids are kept."""
        for movie_id in movie_ids:
            self._get_or_create(movie_id)

    async def load(self, movie_ids: Iterable[str] | None = None) -> int:
        """Reload checkpoints from the store, replacing in-memory state for them.

        Args:
            movie_ids: Movies to load (default: every stored record).

        Returns:
            Number of checkpoints loaded. Store failures are logged and yield 0.
        """
        if self._store is None:
            return 0
        try:
            if movie_ids is None:
                records = await self._store.list_records()
            else:
                records = [
                    r for r in [await self._store.get(m) for m in movie_ids] if r
                ]
        except CheckpointStoreError as e:
            logger.warning("Could not load checkpoints: %s", e)
            return 0

        for record in records:
            self._checkpoints[record.movie_id] = MovieCheckpoint.from_record(record)
        logger.info("Loaded %d checkpoint(s)", len(records))
        return len(records)

    # --- Internals ---

    def _get_or_create(self, movie_id: str) -> MovieCheckpoint:
        checkpoint = self._checkpoints.get(movie_id)
        if checkpoint is None:
            checkpoint = MovieCheckpoint(movie_id=movie_id)
            self._checkpoints[movie_id] = checkpoint
        return checkpoint

    async def _persist(self, checkpoint: MovieCheckpoint) -> None:
        if self._store is None:
            return
        try:
            await self._store.put(checkpoint.to_record())
        except CheckpointStoreError as e:
            logger.warning(
                "Could not persist checkpoint for %s: %s", checkpoint.movie_id, e
            )
