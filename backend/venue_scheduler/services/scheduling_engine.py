"""
Scheduling engine keeping the Venue<->Event relationship consistent.

CONCURRENCY STRATEGY: One Lock, Serialized Operations
=====================================================

Problem:
  The store has no joins and no transactions. Scheduling touches two
  records (the venue's event_ids and the event's status). Two concurrent
  schedule calls for the same event can both read status=Unscheduled, both
  pass the check, and both append the event to a venue.
  Result: one event scheduled in two venues.

Solution:
  The engine owns a single asyncio.Lock. Every operation, read or write,
  runs its whole read-check-write sequence under that lock. Reads never
  observe a half-applied two-record write and checks cannot go stale before
  the writes they guard.

  The lock is per process. Run one worker per store.

WRITE ORDER AND REPLAY
======================

A crash between the two writes of an operation leaves the tables
inconsistent and there is no rollback. Every write is a full-record upsert
computed from the target state, and each operation writes in the order
that lets the same call, replayed, finish the job:

  create_event_in_venue  venue first, then event. Replaying with the same
                         event_id writes the missing event, or returns the
                         existing one if both writes landed.
  unschedule             event first, then venue. The replay still finds
                         the id in the venue and completes.
  schedule               venue first, then event. The replay finds the id
                         in the venue with the event still Unscheduled and
                         writes the event instead of reporting a conflict.

RULES DECIDED HERE
==================

- Capacity is enforced on both paths into a venue (create and schedule).
- edit_event never changes status; status moves only through schedule and
  unschedule, so an edit cannot break venue membership.
"""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from venue_scheduler.core.exceptions import (
    ConflictError, InternalError, InvalidInputError, NotFoundError, SchedulingError,
)
from venue_scheduler.core.logging import get_logger
from venue_scheduler.core.metrics import engine_latency, invariant_violations, record_engine_operation
from venue_scheduler.models.event import Event, EventStatus
from venue_scheduler.models.venue import Venue
from venue_scheduler.schemas.consistency import ConsistencyReport
from venue_scheduler.schemas.event import EventCreate
from venue_scheduler.services import queries
from venue_scheduler.services.interfaces.record_store import RecordStore

logger = get_logger(__name__)

DEFAULT_VENUE_CAPACITY = 5
EDITABLE_EVENT_FIELDS = frozenset({"name", "description", "organizer", "price"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class SchedulingEngine:
    """Venue and event operations over two injected record stores."""

    def __init__(
        self,
        venues: RecordStore[Venue],
        events: RecordStore[Event],
        capacity: int = DEFAULT_VENUE_CAPACITY,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ):
        self.venues = venues
        self.events = events
        self.capacity = capacity
        self._clock = clock
        self._new_id = id_factory
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _operation(self, name: str):
        """Serialize one operation and record its outcome."""
        start = time.perf_counter()
        async with self._lock:
            try:
                yield
            except InternalError as e:
                record_engine_operation(name, "internal")
                logger.error("operation_inconsistent", operation=name, reason=e.message, **e.details)
                raise
            except SchedulingError as e:
                record_engine_operation(name, e.code.lower())
                logger.info("operation_rejected", operation=name, code=e.code, reason=e.message)
                raise
            except Exception as e:
                record_engine_operation(name, "internal")
                logger.exception("operation_failed", operation=name, error=str(e))
                raise InternalError(f"{name} failed: {e}") from e
            else:
                record_engine_operation(name, "success")
            finally:
                engine_latency.labels(operation=name).observe(time.perf_counter() - start)

    async def _require_venue(self, venue_id: str) -> Venue:
        venue = await self.venues.get(venue_id)
        if venue is None:
            raise NotFoundError("Venue does not exist", details={"venue_id": venue_id})
        return venue

    async def _require_event(self, event_id: str, message: str = "Event does not exist") -> Event:
        event = await self.events.get(event_id)
        if event is None:
            raise NotFoundError(message, details={"event_id": event_id})
        return event

    def _ensure_room(self, venue: Venue) -> None:
        if len(venue.event_ids) >= self.capacity:
            raise ConflictError(
                "Venue is full, please find another venue or create one",
                details={"venue_id": venue.id, "capacity": self.capacity},
            )

    # Venues

    async def create_venue(self, name: str) -> Venue:
        async with self._operation("create_venue"):
            venue = Venue(id=self._new_id(), name=name, event_ids=[], created_at=self._clock())
            venue = await self.venues.insert(venue.id, venue)
            logger.info("venue_created", venue_id=venue.id, name=venue.name)
            return venue

    async def rename_venue(self, venue_id: str, name: str) -> Venue:
        async with self._operation("rename_venue"):
            venue = await self._require_venue(venue_id)
            updated = venue.model_copy(update={"name": name, "updated_at": self._clock()})
            updated = await self.venues.insert(venue_id, updated)
            logger.info("venue_renamed", venue_id=venue_id, name=name)
            return updated

    async def delete_venue(self, venue_id: str) -> Venue:
        async with self._operation("delete_venue"):
            venue = await self._require_venue(venue_id)
            if venue.event_ids:
                raise ConflictError(
                    "Venue has scheduled events, please remove all events from the venue before deletion",
                    details={"venue_id": venue_id, "event_ids": list(venue.event_ids)},
                )
            removed = await self.venues.remove(venue_id)
            if removed is None:
                raise InternalError(
                    f"Venue {venue_id} vanished from the store during deletion",
                    details={"venue_id": venue_id},
                )
            logger.info("venue_deleted", venue_id=venue_id)
            return removed

    async def get_venue(self, venue_id: str) -> Venue:
        async with self._operation("get_venue"):
            return await self._require_venue(venue_id)

    async def list_venues(self) -> list[Venue]:
        async with self._operation("list_venues"):
            return await self.venues.values()

    # Events

    async def create_event_in_venue(
        self,
        venue_id: str,
        data: EventCreate,
        event_id: Optional[str] = None,
    ) -> Event:
        """
        Create an event already Scheduled in `venue_id`.

        `event_id` is an optional caller-chosen id. Passing the same id again
        replays the call: a completed create returns the existing event, a
        create interrupted between its two writes is finished.
        """
        async with self._operation("create_event_in_venue"):
            venue = await self._require_venue(venue_id)

            if event_id is not None:
                existing = await self.events.get(event_id)
                if venue.holds(event_id):
                    if existing is not None and existing.is_scheduled:
                        logger.info("event_create_replayed", venue_id=venue_id, event_id=event_id)
                        return existing
                    if existing is not None:
                        # Venue still lists an Unscheduled event; restore it as Scheduled.
                        event = existing.model_copy(update={
                            "status": EventStatus.SCHEDULED,
                            "updated_at": self._clock(),
                        })
                        event = await self.events.insert(event_id, event)
                        logger.warning("event_schedule_completed", venue_id=venue_id, event_id=event_id)
                        return event
                    event = self._build_event(event_id, data)
                    event = await self.events.insert(event.id, event)
                    logger.warning("event_create_completed", venue_id=venue_id, event_id=event_id)
                    return event
                if existing is not None:
                    raise ConflictError(
                        f"Event id {event_id} is already in use",
                        details={"event_id": event_id},
                    )

            self._ensure_room(venue)
            event = self._build_event(event_id or self._new_id(), data)

            updated_venue = venue.model_copy(update={
                "event_ids": [*venue.event_ids, event.id],
                "updated_at": event.created_at,
            })
            await self.venues.insert(venue_id, updated_venue)
            event = await self.events.insert(event.id, event)

            logger.info(
                "event_created",
                venue_id=venue_id,
                event_id=event.id,
                name=event.name,
                venue_events=len(updated_venue.event_ids),
            )
            return event

    def _build_event(self, event_id: str, data: EventCreate) -> Event:
        return Event(
            id=event_id,
            name=data.name,
            description=data.description,
            organizer=data.organizer,
            price=data.price,
            status=EventStatus.SCHEDULED,
            created_at=self._clock(),
        )

    async def unschedule(self, venue_id: str, event_id: str) -> Event:
        """Detach an event from its venue, leaving it Unscheduled."""
        async with self._operation("unschedule"):
            event = await self._require_event(event_id)
            venue = await self._require_venue(venue_id)

            if not venue.holds(event_id):
                raise ConflictError(
                    f"Event with id={event_id} is not scheduled in venue id={venue_id}",
                    details={"venue_id": venue_id, "event_id": event_id},
                )

            now = self._clock()
            # Event first: a replay still finds the id in the venue.
            updated_event = event.model_copy(update={"status": EventStatus.UNSCHEDULED, "updated_at": now})
            updated_event = await self.events.insert(event_id, updated_event)

            remaining = [i for i in venue.event_ids if i != event_id]
            await self.venues.insert(venue_id, venue.model_copy(update={"event_ids": remaining, "updated_at": now}))

            logger.info("event_unscheduled", venue_id=venue_id, event_id=event_id)
            return updated_event

    async def schedule(self, venue_id: str, event_id: str) -> Event:
        """Attach an existing Unscheduled event to a venue."""
        async with self._operation("schedule"):
            event = await self._require_event(event_id)
            venue = await self._require_venue(venue_id)
            now = self._clock()

            if venue.holds(event_id):
                if event.is_scheduled:
                    raise ConflictError(
                        f"Event with id={event_id} is already scheduled in venue id={venue_id}",
                        details={"venue_id": venue_id, "event_id": event_id},
                    )
                # Venue write of an earlier attempt landed; finish the event write.
                updated_event = event.model_copy(update={"status": EventStatus.SCHEDULED, "updated_at": now})
                updated_event = await self.events.insert(event_id, updated_event)
                logger.warning("event_schedule_completed", venue_id=venue_id, event_id=event_id)
                return updated_event

            if event.is_scheduled:
                raise ConflictError(
                    "Event is already scheduled in another venue",
                    details={"event_id": event_id},
                )
            self._ensure_room(venue)

            # Venue first: a replay sees the id in the venue and completes above.
            await self.venues.insert(venue_id, venue.model_copy(update={
                "event_ids": [*venue.event_ids, event_id],
                "updated_at": now,
            }))
            updated_event = event.model_copy(update={"status": EventStatus.SCHEDULED, "updated_at": now})
            updated_event = await self.events.insert(event_id, updated_event)

            logger.info("event_scheduled", venue_id=venue_id, event_id=event_id)
            return updated_event

    async def edit_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        """Merge `changes` into the event, last write wins per field."""
        async with self._operation("edit_event"):
            event = await self._require_event(event_id)

            if "status" in changes:
                raise ConflictError(
                    "Event status cannot be edited directly, schedule or unschedule the event instead",
                    details={"event_id": event_id},
                )
            unknown = set(changes) - EDITABLE_EVENT_FIELDS
            if unknown:
                raise InvalidInputError(
                    f"Unknown event fields: {', '.join(sorted(unknown))}",
                    details={"event_id": event_id},
                )

            try:
                updated = Event.model_validate({
                    **event.model_dump(),
                    **changes,
                    "updated_at": self._clock(),
                })
            except ValidationError as e:
                invalid = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
                raise InvalidInputError(
                    f"Invalid event fields: {', '.join(invalid)}",
                    details={"event_id": event_id, "fields": invalid},
                ) from e

            updated = await self.events.insert(event_id, updated)
            logger.info("event_edited", event_id=event_id, fields=sorted(changes))
            return updated

    async def delete_event(self, event_id: str) -> Event:
        async with self._operation("delete_event"):
            event = await self._require_event(event_id)
            if event.is_scheduled:
                raise ConflictError(
                    "Please remove the event from the venue before deleting",
                    details={"event_id": event_id},
                )
            removed = await self.events.remove(event_id)
            if removed is None:
                raise InternalError(
                    f"Event {event_id} vanished from the store during deletion",
                    details={"event_id": event_id},
                )
            logger.info("event_deleted", event_id=event_id)
            return removed

    async def get_event(self, event_id: str) -> Event:
        async with self._operation("get_event"):
            return await self._require_event(event_id)

    async def list_events(self) -> list[Event]:
        async with self._operation("list_events"):
            return await self.events.values()

    # Queries

    async def find_venue_of_event(self, event_id: str) -> str:
        """
        Return the id of the venue an event is scheduled in.

        Linear scan over venues, see queries.locate_venue.
        """
        async with self._operation("find_venue_of_event"):
            event = await self._require_event(event_id, "This event does not exist")
            if not event.is_scheduled:
                raise ConflictError(
                    "This event is not scheduled in any venue",
                    details={"event_id": event_id},
                )
            venue = await queries.locate_venue(self.venues, event_id)
            if venue is None:
                raise InternalError(
                    "Event is marked Scheduled but no venue lists it",
                    details={"event_id": event_id},
                )
            return venue.id

    async def audit(self) -> ConsistencyReport:
        async with self._operation("audit"):
            report = await queries.audit(self.venues, self.events, self.capacity)
            invariant_violations.set(len(report.violations))
            if report.violations:
                logger.warning(
                    "consistency_audit_failed",
                    violations=len(report.violations),
                    kinds=sorted({v.kind for v in report.violations}),
                )
            return report
