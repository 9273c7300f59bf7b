# src/checkpoint/json_store.py — v1
"""JSON file-based checkpoint store (default CHECKPOINT_BACKEND=json).

One JSON file per movie under CHECKPOINT_ROOT.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from signalgate.checkpoint.base_store import BaseCheckpointStore
from signalgate.checkpoint.models import CheckpointRecord
from signalgate.core.errors import CheckpointStoreError

logger = logging.getLogger(__name__)


class JsonCheckpointStore(BaseCheckpointStore):
    """File-based checkpoint store using JSON files."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    async def get(self, movie_id: str) -> CheckpointRecord | None:
        path = self._record_path(movie_id)
        if not path.exists():
            return None
        return self._read(path)

    async def put(self, record: CheckpointRecord) -> None:
        path = self._record_path(record.movie_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise CheckpointStoreError(
                f"Cannot write checkpoint {record.movie_id}: {e}"
            ) from e

    async def delete(self, movie_id: str) -> None:
        path = self._record_path(movie_id)
        if path.exists():
            path.unlink()

    async def list_records(self) -> list[CheckpointRecord]:
        records: list[CheckpointRecord] = []
        if not self._root.is_dir():
            return records
        for path in sorted(self._root.glob("*.json")):
            record = self._read(path)
            if record is not None:
                records.append(record)
        return records

    def _read(self, path: Path) -> CheckpointRecord | None:
        try:
            return CheckpointRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Skipping unreadable checkpoint %s: %s", path.name, e)
            return None

    def _record_path(self, movie_id: str) -> Path:
        safe_id = movie_id.replace("/", "_").replace("\\", "_").replace(":", "_")
        return self._root / f"{safe_id}.json"
