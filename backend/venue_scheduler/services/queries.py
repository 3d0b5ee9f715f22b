"""
Read-side lookups over the record store.

COMPLEXITY CONTRACT
===================

Events do not store their venue. "Which venue holds event X" is answered by
walking the venue table in store order: O(number of venues), each step a
membership test on a list of at most VENUE_CAPACITY ids.

There is deliberately no secondary event -> venue index. An index would be
a third record every schedule/unschedule has to keep in step, on a store
that has no transactions.

These functions take no lock; SchedulingEngine calls them while holding its
own.
"""

from collections import defaultdict
from typing import Optional

from venue_scheduler.models.event import Event
from venue_scheduler.models.venue import Venue
from venue_scheduler.schemas.consistency import ConsistencyReport, InvariantViolation
from venue_scheduler.services.interfaces.record_store import RecordStore


async def locate_venue(venues: RecordStore[Venue], event_id: str) -> Optional[Venue]:
    """Return the first venue listing `event_id`, or None. Stops at the first match."""
    for venue in await venues.values():
        if venue.holds(event_id):
            return venue
    return None


async def audit(
    venues: RecordStore[Venue],
    events: RecordStore[Event],
    capacity: int,
) -> ConsistencyReport:
    """Full scan of both tables, reporting every broken Venue<->Event invariant."""
    all_venues = await venues.values()
    all_events = {event.id: event for event in await events.values()}

    violations: list[InvariantViolation] = []
    holders: dict[str, list[str]] = defaultdict(list)

    for venue in all_venues:
        if len(venue.event_ids) > capacity:
            violations.append(InvariantViolation(
                kind="capacity_exceeded",
                venue_id=venue.id,
                message=f"Venue holds {len(venue.event_ids)} events, capacity is {capacity}",
            ))

        seen: set[str] = set()
        for event_id in venue.event_ids:
            if event_id in seen:
                violations.append(InvariantViolation(
                    kind="duplicate_reference",
                    venue_id=venue.id,
                    event_id=event_id,
                    message="Event is listed more than once in the venue",
                ))
                continue
            seen.add(event_id)
            holders[event_id].append(venue.id)

            event = all_events.get(event_id)
            if event is None:
                violations.append(InvariantViolation(
                    kind="dangling_reference",
                    venue_id=venue.id,
                    event_id=event_id,
                    message="Venue lists an event that does not exist",
                ))
            elif not event.is_scheduled:
                violations.append(InvariantViolation(
                    kind="unscheduled_referenced",
                    venue_id=venue.id,
                    event_id=event_id,
                    message="Venue lists an Unscheduled event",
                ))

    for event in all_events.values():
        if not event.is_scheduled:
            continue
        venue_ids = holders.get(event.id, [])
        if not venue_ids:
            violations.append(InvariantViolation(
                kind="scheduled_unreferenced",
                event_id=event.id,
                message="Event is Scheduled but no venue lists it",
            ))
        elif len(venue_ids) > 1:
            violations.append(InvariantViolation(
                kind="multiple_venues",
                event_id=event.id,
                message=f"Event is listed by {len(venue_ids)} venues: {', '.join(venue_ids)}",
            ))

    return ConsistencyReport(
        consistent=not violations,
        venues_checked=len(all_venues),
        events_checked=len(all_events),
        violations=violations,
    )
