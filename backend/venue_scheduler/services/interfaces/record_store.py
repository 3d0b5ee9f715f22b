"""
Record store interface.
The scheduling engine depends on this abstraction only, so the table backend
(in-memory or Redis) can be swapped without touching scheduling logic.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore(ABC, Generic[RecordT]):
    """
    Ordered key-value table from string id to a typed record.

    Contract:
    - insert() upserts; an existing id keeps its original position
    - get() / remove() return None for a missing id, never raise
    - values() is a snapshot in insertion order
    - no secondary indexes: any lookup other than by id is a full scan

    Implementations:
    - InMemoryRecordStore: insertion-ordered dict, process-local
    - RedisRecordStore: hash + sorted set per table
    """

    table: str

    @abstractmethod
    async def insert(self, record_id: str, record: RecordT) -> RecordT:
        """
        Upsert a record.

        Args:
            record_id: Primary key
            record: Record to store

        Returns:
            The record as stored
        """
        pass

    @abstractmethod
    async def get(self, record_id: str) -> Optional[RecordT]:
        pass

    @abstractmethod
    async def remove(self, record_id: str) -> Optional[RecordT]:
        """Delete a record, returning it if it was present."""
        pass

    @abstractmethod
    async def values(self) -> list[RecordT]:
        pass
