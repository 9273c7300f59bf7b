# src/checkpoint/redis_store.py — v1
"""Redis-based checkpoint store (CHECKPOINT_BACKEND=redis).

Requires 'redis' package: pip install signalgate[redis].
Shares checkpoint state between workers on different hosts.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from signalgate.checkpoint.base_store import BaseCheckpointStore
from signalgate.checkpoint.models import CheckpointRecord
from signalgate.core.errors import CheckpointStoreError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "signalgate:checkpoint:"
_INDEX_KEY = "signalgate:checkpoint:__index__"


class RedisCheckpointStore(BaseCheckpointStore):
    """Redis-backed checkpoint store."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install signalgate[redis]"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._redis_error: type[Exception] = redis.RedisError

    async def get(self, movie_id: str) -> CheckpointRecord | None:
        try:
            data = self._client.get(f"{_KEY_PREFIX}{movie_id}")
        except self._redis_error as e:
            raise CheckpointStoreError(f"Cannot read checkpoint {movie_id}: {e}") from e
        if data is None:
            return None
        try:
            return CheckpointRecord.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize checkpoint %s: %s", movie_id, e)
            return None

    async def put(self, record: CheckpointRecord) -> None:
        try:
            self._client.set(f"{_KEY_PREFIX}{record.movie_id}", record.model_dump_json())
            # Index set backs list_records
            self._client.sadd(_INDEX_KEY, record.movie_id)
        except self._redis_error as e:
            raise CheckpointStoreError(
                f"Cannot write checkpoint {record.movie_id}: {e}"
            ) from e

    async def delete(self, movie_id: str) -> None:
        self._client.delete(f"{_KEY_PREFIX}{movie_id}")
        self._client.srem(_INDEX_KEY, movie_id)

    async def list_records(self) -> list[CheckpointRecord]:
        try:
            movie_ids = self._client.smembers(_INDEX_KEY)
        except self._redis_error as e:
            raise CheckpointStoreError(f"Cannot list checkpoints: {e}") from e
        records: list[CheckpointRecord] = []
        for movie_id in sorted(movie_ids):
            record = await self.get(movie_id)
            if record is not None:
                records.append(record)
        return records

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
