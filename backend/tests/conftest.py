"""
Pytest fixtures for the scheduling engine, HTTP client, and seeded records.

Every test gets a fresh engine over in-memory stores; the HTTP client
overrides the engine dependency so requests hit the same instance the test
inspects.
"""

import asyncio
from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from venue_scheduler.main import app
from venue_scheduler.api.deps import get_engine
from venue_scheduler.models.event import Event
from venue_scheduler.models.venue import Venue
from venue_scheduler.schemas.event import EventCreate
from venue_scheduler.services.interfaces.memory_store import InMemoryRecordStore
from venue_scheduler.services.scheduling_engine import SchedulingEngine


class YieldingStore(InMemoryRecordStore):
    """In-memory store that yields to the event loop on every call, like a network store would."""

    async def insert(self, record_id, record):
        await asyncio.sleep(0)
        return await super().insert(record_id, record)

    async def get(self, record_id):
        await asyncio.sleep(0)
        return await super().get(record_id)

    async def remove(self, record_id):
        await asyncio.sleep(0)
        return await super().remove(record_id)

    async def values(self):
        await asyncio.sleep(0)
        return await super().values()


class CrashingStore(InMemoryRecordStore):
    """In-memory store whose next insert can be made to fail, simulating a crash mid-operation."""

    def __init__(self, table: str):
        super().__init__(table)
        self.crash_next_insert = False

    async def insert(self, record_id, record):
        if self.crash_next_insert:
            self.crash_next_insert = False
            raise ConnectionError(f"{self.table} store unavailable")
        return await super().insert(record_id, record)


@pytest.fixture
def engine() -> SchedulingEngine:
    return SchedulingEngine(InMemoryRecordStore("venues"), InMemoryRecordStore("events"), capacity=5)


@pytest_asyncio.fixture(scope="function")
async def client(engine: SchedulingEngine) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test engine."""
    app.dependency_overrides[get_engine] = lambda: engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def venue(engine: SchedulingEngine) -> Venue:
    return await engine.create_venue("Main Hall")


@pytest_asyncio.fixture
async def other_venue(engine: SchedulingEngine) -> Venue:
    return await engine.create_venue("Side Stage")


@pytest_asyncio.fixture
async def scheduled_event(engine: SchedulingEngine, venue: Venue) -> Event:
    """An event scheduled in `venue`."""
    return await engine.create_event_in_venue(
        venue.id,
        EventCreate(name="Gig", description="Live set", organizer="Acme", price=25.0),
    )


@pytest_asyncio.fixture
async def unscheduled_event(engine: SchedulingEngine, venue: Venue, scheduled_event: Event) -> Event:
    """An event created in `venue` and then removed from it."""
    return await engine.unschedule(venue.id, scheduled_event.id)


@pytest.fixture
def assert_consistent(engine: SchedulingEngine) -> Callable[[], Awaitable[None]]:
    """Await the returned callable to assert the engine's tables satisfy every invariant."""

    async def check() -> None:
        report = await engine.audit()
        assert report.consistent, report.violations

    return check
