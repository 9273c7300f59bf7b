# src/checkpoint/base_store.py — v1
"""Abstract checkpoint store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from signalgate.checkpoint.models import CheckpointRecord


class BaseCheckpointStore(ABC):
    """Unified interface for checkpoint persistence backends.

    Implementations raise CheckpointStoreError on backend failures.
    """

    @abstractmethod
    async def get(self, movie_id: str) -> CheckpointRecord | None:
        """Retrieve the record for one movie."""

    @abstractmethod
    async def put(self, record: CheckpointRecord) -> None:
        """Store a record (upsert by movie_id)."""

    @abstractmethod
    async def delete(self, movie_id: str) -> None:
        """Remove a record; missing records are ignored."""

    @abstractmethod
    async def list_records(self) -> list[CheckpointRecord]:
        """List every stored record."""

    def close(self) -> None:
        """Release backend resources."""
