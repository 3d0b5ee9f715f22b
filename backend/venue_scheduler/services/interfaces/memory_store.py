"""
In-memory record store - the default backend.
Process-local; contents are lost on restart.
"""

from typing import Optional

from venue_scheduler.core.metrics import record_store_operation
from venue_scheduler.services.interfaces.record_store import RecordStore, RecordT


class InMemoryRecordStore(RecordStore[RecordT]):
    """
    Records live in a plain dict, which preserves insertion order.

    Records are deep-copied on the way in and out so callers can never
    mutate stored state through a reference they hold.

    Use when:
    - Running tests
    - Single-process development servers
    """

    def __init__(self, table: str):
        self.table = table
        self._records: dict[str, RecordT] = {}

    async def insert(self, record_id: str, record: RecordT) -> RecordT:
        record_store_operation(self.table, "insert")
        self._records[record_id] = record.model_copy(deep=True)
        return record.model_copy(deep=True)

    async def get(self, record_id: str) -> Optional[RecordT]:
        record_store_operation(self.table, "get")
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    async def remove(self, record_id: str) -> Optional[RecordT]:
        record_store_operation(self.table, "remove")
        return self._records.pop(record_id, None)

    async def values(self) -> list[RecordT]:
        record_store_operation(self.table, "values")
        return [record.model_copy(deep=True) for record in self._records.values()]
