"""
Record store factory.
Configures which backend holds the venue and event tables.
"""

from venue_scheduler.core.config import Settings
from venue_scheduler.models.event import Event
from venue_scheduler.models.venue import Venue
from venue_scheduler.services.interfaces.memory_store import InMemoryRecordStore
from venue_scheduler.services.interfaces.record_store import RecordStore
from venue_scheduler.infrastructure.redis_client import get_redis
from venue_scheduler.infrastructure.redis_store import RedisRecordStore

VENUE_TABLE = "venues"
EVENT_TABLE = "events"


async def build_stores(settings: Settings) -> tuple[RecordStore[Venue], RecordStore[Event]]:
    """
    Build the venue and event tables for the configured backend.

    Backend selection via STORE_BACKEND:
    - memory: InMemoryRecordStore (default, tests, single process)
    - redis: RedisRecordStore (survives restarts)
    """
    backend = settings.STORE_BACKEND.lower()

    if backend == "redis":
        client = await get_redis()
        return (
            RedisRecordStore(client, VENUE_TABLE, Venue, settings.REDIS_KEY_PREFIX),
            RedisRecordStore(client, EVENT_TABLE, Event, settings.REDIS_KEY_PREFIX),
        )
    if backend == "memory":
        return InMemoryRecordStore(VENUE_TABLE), InMemoryRecordStore(EVENT_TABLE)

    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r}")
