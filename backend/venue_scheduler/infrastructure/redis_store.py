"""
Redis-backed record store.

LAYOUT
======

Each table uses three keys under the configured prefix:

  {prefix}:{table}:records   HASH   id -> record JSON
  {prefix}:{table}:order     ZSET   id scored by first-insert sequence
  {prefix}:{table}:seq       STRING monotonically increasing counter

Insertion order:
  A new id takes the next sequence number. Upserting an existing id uses
  ZADD NX so its original position is kept.

Atomicity:
  The HASH and ZSET writes for one record go through a MULTI/EXEC pipeline,
  so a single-record insert or remove is all-or-nothing. Multi-record
  atomicity is not provided here; the scheduling engine orders its writes so
  replays converge.

values() is ZRANGE + HMGET: O(N) in the table size, like any scan here.
"""

from typing import Optional

import redis.asyncio as redis

from venue_scheduler.core.metrics import record_store_operation
from venue_scheduler.services.interfaces.record_store import RecordStore, RecordT


class RedisRecordStore(RecordStore[RecordT]):

    def __init__(self, client: redis.Redis, table: str, model: type[RecordT], prefix: str):
        self.client = client
        self.table = table
        self.model = model
        self._records_key = f"{prefix}:{table}:records"
        self._order_key = f"{prefix}:{table}:order"
        self._seq_key = f"{prefix}:{table}:seq"

    def _decode(self, raw: Optional[str]) -> Optional[RecordT]:
        if raw is None:
            return None
        return self.model.model_validate_json(raw)

    async def insert(self, record_id: str, record: RecordT) -> RecordT:
        record_store_operation(self.table, "insert")
        seq = await self.client.incr(self._seq_key)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.hset(self._records_key, record_id, record.model_dump_json())
            pipe.zadd(self._order_key, {record_id: seq}, nx=True)
            await pipe.execute()
        return record.model_copy(deep=True)

    async def get(self, record_id: str) -> Optional[RecordT]:
        record_store_operation(self.table, "get")
        return self._decode(await self.client.hget(self._records_key, record_id))

    async def remove(self, record_id: str) -> Optional[RecordT]:
        record_store_operation(self.table, "remove")
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.hget(self._records_key, record_id)
            pipe.hdel(self._records_key, record_id)
            pipe.zrem(self._order_key, record_id)
            raw, _, _ = await pipe.execute()
        return self._decode(raw)

    async def values(self) -> list[RecordT]:
        record_store_operation(self.table, "values")
        ids = await self.client.zrange(self._order_key, 0, -1)
        if not ids:
            return []
        raws = await self.client.hmget(self._records_key, ids)
        return [self.model.model_validate_json(raw) for raw in raws if raw is not None]

    async def clear(self) -> None:
        """Drop the whole table. Used by tests and local resets."""
        await self.client.delete(self._records_key, self._order_key, self._seq_key)
