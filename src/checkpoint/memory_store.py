# src/checkpoint/memory_store.py — v1
"""In-process checkpoint store (CHECKPOINT_BACKEND=memory)."""

from __future__ import annotations

from signalgate.checkpoint.base_store import BaseCheckpointStore
from signalgate.checkpoint.models import CheckpointRecord


class MemoryCheckpointStore(BaseCheckpointStore):
    """Dict-backed store. Records are copied in and out."""

    def __init__(self) -> None:
        self._records: dict[str, CheckpointRecord] = {}

    async def get(self, movie_id: str) -> CheckpointRecord | None:
        record = self._records.get(movie_id)
        return record.model_copy(deep=True) if record else None

    async def put(self, record: CheckpointRecord) -> None:
        self._records[record.movie_id] = record.model_copy(deep=True)

    async def delete(self, movie_id: str) -> None:
        self._records.pop(movie_id, None)

    async def list_records(self) -> list[CheckpointRecord]:
        return [r.model_copy(deep=True) for r in self._records.values()]
