# src/checkpoint/sqlite_store.py — v1
"""SQLite-based checkpoint store (CHECKPOINT_BACKEND=sqlite).

Uses stdlib sqlite3. Status, last stage and completeness are also stored
as columns so they can be queried directly.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pydantic import ValidationError

from signalgate.checkpoint.base_store import BaseCheckpointStore
from signalgate.checkpoint.models import CheckpointRecord
from signalgate.core.errors import CheckpointStoreError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS checkpoints (
    movie_id TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    status TEXT NOT NULL,
    last_stage TEXT,
    completeness_score REAL NOT NULL DEFAULT 0,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_checkpoint_status ON checkpoints(status);
"""


class SqliteCheckpointStore(BaseCheckpointStore):
    """SQLite-backed checkpoint store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, movie_id: str) -> CheckpointRecord | None:
        try:
            row = self._conn.execute(
                "SELECT data FROM checkpoints WHERE movie_id = ?", (movie_id,)
            ).fetchone()
        except sqlite3.Error as e:
            raise CheckpointStoreError(f"Cannot read checkpoint {movie_id}: {e}") from e
        if row is None:
            return None
        return self._decode(movie_id, row[0])

    async def put(self, record: CheckpointRecord) -> None:
        """Upsert a record."""
        try:
            self._conn.execute(
                """INSERT OR REPLACE INTO checkpoints
                   (movie_id, data, status, last_stage, completeness_score, updated_at)
                   VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)""",
                (
                    record.movie_id,
                    record.model_dump_json(),
                    record.status,
                    record.last_stage,
                    record.completeness_score,
                ),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise CheckpointStoreError(
                f"Cannot write checkpoint {record.movie_id}: {e}"
            ) from e

    async def delete(self, movie_id: str) -> None:
        self._conn.execute("DELETE FROM checkpoints WHERE movie_id = ?", (movie_id,))
        self._conn.commit()

    async def list_records(self) -> list[CheckpointRecord]:
        try:
            rows = self._conn.execute(
                "SELECT movie_id, data FROM checkpoints ORDER BY movie_id"
            ).fetchall()
        except sqlite3.Error as e:
            raise CheckpointStoreError(f"Cannot list checkpoints: {e}") from e
        records: list[CheckpointRecord] = []
        for movie_id, data in rows:
            record = self._decode(movie_id, data)
            if record is not None:
                records.append(record)
        return records

    def count_by_status(self) -> dict[str, int]:
        rows = self._conn.execute(
            "SELECT status, COUNT(*) FROM checkpoints GROUP BY status"
        ).fetchall()
        return {status: count for status, count in rows}

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @staticmethod
    def _decode(movie_id: str, data: str) -> CheckpointRecord | None:
        try:
            return CheckpointRecord.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize checkpoint %s: %s", movie_id, e)
            return None
