"""
Tests for the scheduling engine: venue lifecycle, scheduling state machine,
guarded deletes, edits and the venue search.
"""

import pytest

from venue_scheduler.core.exceptions import (
    ConflictError,
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from venue_scheduler.models.event import Event, EventStatus
from venue_scheduler.schemas.event import EventCreate
from venue_scheduler.services.interfaces.memory_store import InMemoryRecordStore
from venue_scheduler.services.scheduling_engine import SchedulingEngine


def gig(name: str = "Gig") -> EventCreate:
    return EventCreate(name=name, description="", organizer="Acme", price=10)


# Venues

@pytest.mark.asyncio
async def test_create_venue_starts_empty(engine):
    venue = await engine.create_venue("Main Hall")
    assert venue.name == "Main Hall"
    assert venue.event_ids == []
    assert venue.created_at is not None
    assert venue.updated_at is None
    assert await engine.get_venue(venue.id) == venue


@pytest.mark.asyncio
async def test_venue_ids_are_unique(engine):
    first = await engine.create_venue("A")
    second = await engine.create_venue("B")
    assert first.id != second.id


@pytest.mark.asyncio
async def test_list_venues_in_creation_order(engine):
    names = ["A", "B", "C"]
    for name in names:
        await engine.create_venue(name)
    assert [v.name for v in await engine.list_venues()] == names


@pytest.mark.asyncio
async def test_rename_venue_keeps_events(engine, venue, scheduled_event):
    renamed = await engine.rename_venue(venue.id, "Grand Hall")
    assert renamed.name == "Grand Hall"
    assert renamed.updated_at is not None
    assert renamed.event_ids == [scheduled_event.id]


@pytest.mark.asyncio
async def test_rename_missing_venue(engine):
    with pytest.raises(NotFoundError, match="Venue does not exist"):
        await engine.rename_venue("missing", "Nope")


@pytest.mark.asyncio
async def test_get_missing_venue(engine):
    with pytest.raises(NotFoundError):
        await engine.get_venue("missing")


@pytest.mark.asyncio
async def test_delete_empty_venue(engine, venue):
    removed = await engine.delete_venue(venue.id)
    assert removed.id == venue.id
    with pytest.raises(NotFoundError):
        await engine.get_venue(venue.id)


@pytest.mark.asyncio
async def test_delete_venue_with_events_is_refused(engine, venue, scheduled_event):
    """Deleting a non-empty venue fails and leaves venue and event unchanged."""
    venue_before = await engine.get_venue(venue.id)
    event_before = await engine.get_event(scheduled_event.id)

    with pytest.raises(ConflictError, match="scheduled events"):
        await engine.delete_venue(venue.id)

    assert await engine.get_venue(venue.id) == venue_before
    assert await engine.get_event(scheduled_event.id) == event_before


@pytest.mark.asyncio
async def test_delete_missing_venue(engine):
    with pytest.raises(NotFoundError):
        await engine.delete_venue("missing")


# Creating events

@pytest.mark.asyncio
async def test_create_event_schedules_it(engine, venue, assert_consistent):
    event = await engine.create_event_in_venue(venue.id, gig())
    assert event.status == EventStatus.SCHEDULED
    assert event.updated_at is None

    stored_venue = await engine.get_venue(venue.id)
    assert stored_venue.event_ids == [event.id]
    assert stored_venue.updated_at is not None
    await assert_consistent()


@pytest.mark.asyncio
async def test_create_event_in_missing_venue(engine):
    with pytest.raises(NotFoundError):
        await engine.create_event_in_venue("missing", gig())
    assert await engine.list_events() == []


@pytest.mark.asyncio
async def test_venue_holds_at_most_five_events(engine, venue, assert_consistent):
    """Five creates succeed, the sixth is refused as full."""
    for i in range(5):
        await engine.create_event_in_venue(venue.id, gig(f"Gig {i}"))

    with pytest.raises(ConflictError, match="Venue is full"):
        await engine.create_event_in_venue(venue.id, gig("Gig 6"))

    assert len((await engine.get_venue(venue.id)).event_ids) == 5
    assert len(await engine.list_events()) == 5
    await assert_consistent()


@pytest.mark.asyncio
async def test_capacity_is_configurable():
    engine = SchedulingEngine(InMemoryRecordStore("venues"), InMemoryRecordStore("events"), capacity=1)
    venue = await engine.create_venue("Closet")
    await engine.create_event_in_venue(venue.id, gig())
    with pytest.raises(ConflictError, match="full"):
        await engine.create_event_in_venue(venue.id, gig())


@pytest.mark.asyncio
async def test_create_with_event_id_is_replayable(engine, venue, assert_consistent):
    first = await engine.create_event_in_venue(venue.id, gig(), event_id="evt-1")
    again = await engine.create_event_in_venue(venue.id, gig(), event_id="evt-1")

    assert first.id == again.id == "evt-1"
    assert (await engine.get_venue(venue.id)).event_ids == ["evt-1"]
    await assert_consistent()


@pytest.mark.asyncio
async def test_create_with_event_id_in_use_elsewhere(engine, venue, other_venue):
    await engine.create_event_in_venue(venue.id, gig(), event_id="evt-1")
    with pytest.raises(ConflictError, match="already in use"):
        await engine.create_event_in_venue(other_venue.id, gig(), event_id="evt-1")
    assert (await engine.get_venue(other_venue.id)).event_ids == []


# Unscheduling

@pytest.mark.asyncio
async def test_unschedule(engine, venue, scheduled_event, assert_consistent):
    event = await engine.unschedule(venue.id, scheduled_event.id)
    assert event.status == EventStatus.UNSCHEDULED
    assert event.updated_at is not None
    assert (await engine.get_venue(venue.id)).event_ids == []
    await assert_consistent()


@pytest.mark.asyncio
async def test_unschedule_keeps_order_of_remaining(engine, venue):
    ids = [(await engine.create_event_in_venue(venue.id, gig(n))).id for n in "abcd"]
    await engine.unschedule(venue.id, ids[1])
    assert (await engine.get_venue(venue.id)).event_ids == [ids[0], ids[2], ids[3]]


@pytest.mark.asyncio
async def test_unschedule_checks_event_before_venue(engine):
    with pytest.raises(NotFoundError, match="Event does not exist"):
        await engine.unschedule("missing-venue", "missing-event")


@pytest.mark.asyncio
async def test_unschedule_missing_venue(engine, scheduled_event):
    with pytest.raises(NotFoundError, match="Venue does not exist"):
        await engine.unschedule("missing", scheduled_event.id)


@pytest.mark.asyncio
async def test_unschedule_from_wrong_venue(engine, other_venue, scheduled_event):
    with pytest.raises(ConflictError, match="is not scheduled in venue"):
        await engine.unschedule(other_venue.id, scheduled_event.id)
    assert (await engine.get_event(scheduled_event.id)).status == EventStatus.SCHEDULED


# Scheduling

@pytest.mark.asyncio
async def test_move_event_between_venues(engine, venue, other_venue, assert_consistent):
    """An event must leave its venue before it can be scheduled elsewhere."""
    event = await engine.create_event_in_venue(venue.id, gig())

    with pytest.raises(ConflictError, match="already scheduled in another venue"):
        await engine.schedule(other_venue.id, event.id)

    await engine.unschedule(venue.id, event.id)
    scheduled = await engine.schedule(other_venue.id, event.id)

    assert scheduled.status == EventStatus.SCHEDULED
    assert (await engine.get_venue(venue.id)).event_ids == []
    assert (await engine.get_venue(other_venue.id)).event_ids == [event.id]
    assert await engine.find_venue_of_event(event.id) == other_venue.id
    await assert_consistent()


@pytest.mark.asyncio
async def test_schedule_into_same_venue_twice(engine, venue, scheduled_event):
    with pytest.raises(ConflictError, match="already scheduled in venue"):
        await engine.schedule(venue.id, scheduled_event.id)
    assert (await engine.get_venue(venue.id)).event_ids == [scheduled_event.id]


@pytest.mark.asyncio
async def test_schedule_missing_records(engine, venue, unscheduled_event):
    with pytest.raises(NotFoundError, match="Event does not exist"):
        await engine.schedule(venue.id, "missing")
    with pytest.raises(NotFoundError, match="Venue does not exist"):
        await engine.schedule("missing", unscheduled_event.id)


@pytest.mark.asyncio
async def test_schedule_respects_capacity(engine, other_venue, unscheduled_event, assert_consistent):
    for i in range(5):
        await engine.create_event_in_venue(other_venue.id, gig(f"Gig {i}"))

    with pytest.raises(ConflictError, match="Venue is full"):
        await engine.schedule(other_venue.id, unscheduled_event.id)

    assert (await engine.get_event(unscheduled_event.id)).status == EventStatus.UNSCHEDULED
    await assert_consistent()


@pytest.mark.asyncio
async def test_schedule_then_unschedule_restores_venue(engine, venue, other_venue):
    ids = [(await engine.create_event_in_venue(venue.id, gig(n))).id for n in "abc"]
    await engine.unschedule(venue.id, ids[0])
    before = (await engine.get_venue(venue.id)).event_ids

    await engine.schedule(venue.id, ids[0])
    assert (await engine.get_venue(venue.id)).event_ids == [*before, ids[0]]

    event = await engine.unschedule(venue.id, ids[0])
    assert event.status == EventStatus.UNSCHEDULED
    assert (await engine.get_venue(venue.id)).event_ids == before


# Editing and deleting events

@pytest.mark.asyncio
async def test_edit_event_merges_fields(engine, scheduled_event):
    edited = await engine.edit_event(scheduled_event.id, {"name": "Late Gig", "price": 30})
    assert edited.name == "Late Gig"
    assert edited.price == 30
    assert edited.organizer == scheduled_event.organizer
    assert edited.description == scheduled_event.description
    assert edited.status == EventStatus.SCHEDULED
    assert edited.updated_at is not None


@pytest.mark.asyncio
async def test_edit_event_refuses_status(engine, venue, scheduled_event, assert_consistent):
    with pytest.raises(ConflictError, match="status cannot be edited"):
        await engine.edit_event(scheduled_event.id, {"status": "Unscheduled"})
    assert (await engine.get_event(scheduled_event.id)).status == EventStatus.SCHEDULED
    await assert_consistent()


@pytest.mark.asyncio
async def test_edit_event_refuses_negative_price(engine, scheduled_event):
    with pytest.raises(InvalidInputError, match="Invalid event fields: price") as exc_info:
        await engine.edit_event(scheduled_event.id, {"price": -1})
    assert exc_info.value.status_code == 422
    assert (await engine.get_event(scheduled_event.id)).price == scheduled_event.price


@pytest.mark.asyncio
async def test_edit_event_refuses_null_name(engine, scheduled_event):
    with pytest.raises(InvalidInputError, match="Invalid event fields: name"):
        await engine.edit_event(scheduled_event.id, {"name": None})
    assert (await engine.get_event(scheduled_event.id)).name == scheduled_event.name


@pytest.mark.asyncio
async def test_edit_event_refuses_unknown_fields(engine, scheduled_event):
    with pytest.raises(InvalidInputError, match="Unknown event fields: id"):
        await engine.edit_event(scheduled_event.id, {"id": "other"})


@pytest.mark.asyncio
async def test_edit_missing_event(engine):
    with pytest.raises(NotFoundError):
        await engine.edit_event("missing", {"name": "x"})


@pytest.mark.asyncio
async def test_delete_unscheduled_event(engine, unscheduled_event):
    await engine.delete_event(unscheduled_event.id)
    assert await engine.list_events() == []


@pytest.mark.asyncio
async def test_delete_scheduled_event_is_refused(engine, venue, scheduled_event):
    """Deleting a Scheduled event fails and leaves event and venue unchanged."""
    venue_before = await engine.get_venue(venue.id)

    with pytest.raises(ConflictError, match="remove the event from the venue"):
        await engine.delete_event(scheduled_event.id)

    assert await engine.get_event(scheduled_event.id) == scheduled_event
    assert await engine.get_venue(venue.id) == venue_before


@pytest.mark.asyncio
async def test_delete_missing_event(engine):
    with pytest.raises(NotFoundError):
        await engine.delete_event("missing")


# Search

@pytest.mark.asyncio
async def test_find_venue_of_event(engine, venue, other_venue):
    await engine.create_event_in_venue(venue.id, gig())
    event = await engine.create_event_in_venue(other_venue.id, gig())
    assert await engine.find_venue_of_event(event.id) == other_venue.id


@pytest.mark.asyncio
async def test_find_venue_of_missing_event(engine, venue):
    with pytest.raises(NotFoundError, match="does not exist"):
        await engine.find_venue_of_event("missing")


@pytest.mark.asyncio
async def test_find_venue_of_unscheduled_event(engine, unscheduled_event):
    with pytest.raises(ConflictError, match="not scheduled in any venue"):
        await engine.find_venue_of_event(unscheduled_event.id)


@pytest.mark.asyncio
async def test_find_venue_of_orphaned_scheduled_event(engine, venue, scheduled_event):
    """A Scheduled event no venue lists is reported as an internal inconsistency."""
    await engine.venues.insert(venue.id, venue.model_copy(update={"event_ids": []}))

    with pytest.raises(InternalError, match="no venue lists it"):
        await engine.find_venue_of_event(scheduled_event.id)


# Audit and faults

@pytest.mark.asyncio
async def test_audit_reports_corruption(engine, venue, scheduled_event):
    orphan = Event(id="orphan", name="Lost", status=EventStatus.SCHEDULED, created_at=venue.created_at)
    await engine.events.insert(orphan.id, orphan)
    await engine.venues.insert(
        venue.id,
        venue.model_copy(update={"event_ids": [scheduled_event.id, scheduled_event.id, "ghost"]}),
    )

    report = await engine.audit()

    assert not report.consistent
    assert {v.kind for v in report.violations} == {
        "duplicate_reference",
        "dangling_reference",
        "scheduled_unreferenced",
    }


@pytest.mark.asyncio
async def test_audit_reports_event_in_two_venues(engine, venue, other_venue, scheduled_event):
    await engine.venues.insert(other_venue.id, other_venue.model_copy(update={"event_ids": [scheduled_event.id]}))

    report = await engine.audit()

    assert [v.kind for v in report.violations] == ["multiple_venues"]


@pytest.mark.asyncio
async def test_store_fault_surfaces_as_internal_error():
    class BrokenStore(InMemoryRecordStore):
        async def get(self, record_id):
            raise ConnectionError("connection reset")

    engine = SchedulingEngine(BrokenStore("venues"), InMemoryRecordStore("events"))

    with pytest.raises(InternalError, match="connection reset") as exc_info:
        await engine.get_venue("any")
    assert isinstance(exc_info.value.__cause__, ConnectionError)
