# src/checkpoint/store_factory.py — v1
"""Factory for checkpoint store instantiation."""

from __future__ import annotations

from signalgate.checkpoint.base_store import BaseCheckpointStore
from signalgate.config.settings import Settings


def create_checkpoint_store(settings: Settings | None = None) -> BaseCheckpointStore:
    """Instantiate the configured checkpoint backend.

    Args:
        settings: Application settings. Defaults to an in-memory store.

    Returns:
        Configured BaseCheckpointStore implementation.
    """
    if settings is None or settings.checkpoint_backend == "memory":
        from signalgate.checkpoint.memory_store import MemoryCheckpointStore
        return MemoryCheckpointStore()

    backend = settings.checkpoint_backend
    if backend == "json":
        from signalgate.checkpoint.json_store import JsonCheckpointStore
        return JsonCheckpointStore(root=settings.checkpoint_root)

    if backend == "sqlite":
        from signalgate.checkpoint.sqlite_store import SqliteCheckpointStore
        return SqliteCheckpointStore(
            db_path=settings.checkpoint_root / "signalgate_checkpoints.db"
        )

    if backend == "redis":
        from signalgate.checkpoint.redis_store import RedisCheckpointStore
        if not settings.checkpoint_redis_url:
            raise ValueError(
                "CHECKPOINT_REDIS_URL must be set when CHECKPOINT_BACKEND=redis"
            )
        return RedisCheckpointStore(redis_url=settings.checkpoint_redis_url)

    raise ValueError(f"Unsupported checkpoint backend: {backend!r}")
