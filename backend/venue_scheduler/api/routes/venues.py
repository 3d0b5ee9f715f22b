"""
Venue endpoints, including scheduling events into and out of a venue.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, status

from venue_scheduler.api.deps import get_engine
from venue_scheduler.models.event import Event
from venue_scheduler.models.venue import Venue
from venue_scheduler.schemas.event import EventCreate, MessageResponse
from venue_scheduler.schemas.venue import VenueCreate, VenueListResponse, VenueUpdate
from venue_scheduler.services.scheduling_engine import SchedulingEngine

router = APIRouter(prefix="/venues", tags=["Venues"])


@router.post("/", response_model=Venue, status_code=status.HTTP_201_CREATED)
async def create_venue_endpoint(
    venue_data: VenueCreate,
    engine: SchedulingEngine = Depends(get_engine),
):
    """Create an empty venue."""
    return await engine.create_venue(venue_data.name)


@router.get("/", response_model=VenueListResponse)
async def list_venues_endpoint(engine: SchedulingEngine = Depends(get_engine)):
    venues = await engine.list_venues()
    return VenueListResponse(venues=venues, total=len(venues))


@router.get("/{venue_id}", response_model=Venue)
async def get_venue_endpoint(venue_id: str, engine: SchedulingEngine = Depends(get_engine)):
    return await engine.get_venue(venue_id)


@router.put("/{venue_id}", response_model=Venue)
async def rename_venue_endpoint(
    venue_id: str,
    venue_data: VenueUpdate,
    engine: SchedulingEngine = Depends(get_engine),
):
    """Rename a venue. Its scheduled events are untouched."""
    return await engine.rename_venue(venue_id, venue_data.name)


@router.delete("/{venue_id}", response_model=MessageResponse)
async def delete_venue_endpoint(venue_id: str, engine: SchedulingEngine = Depends(get_engine)):
    """Delete a venue. Fails with 400 while any event is scheduled in it."""
    await engine.delete_venue(venue_id)
    return MessageResponse(message="Venue deleted successfully")


@router.post("/{venue_id}/events", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    venue_id: str,
    event_data: EventCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    engine: SchedulingEngine = Depends(get_engine),
):
    """
    Create an event and schedule it in the venue.

    Send an Idempotency-Key header to make retries safe: it becomes the
    event id, and repeating the request returns the same event.
    """
    return await engine.create_event_in_venue(venue_id, event_data, event_id=idempotency_key)


@router.put("/{venue_id}/events/{event_id}", response_model=MessageResponse)
async def schedule_event_endpoint(
    venue_id: str,
    event_id: str,
    engine: SchedulingEngine = Depends(get_engine),
):
    """Schedule an existing Unscheduled event in the venue."""
    await engine.schedule(venue_id, event_id)
    return MessageResponse(message="Event added to venue successfully")


@router.delete("/{venue_id}/events/{event_id}", response_model=MessageResponse)
async def unschedule_event_endpoint(
    venue_id: str,
    event_id: str,
    engine: SchedulingEngine = Depends(get_engine),
):
    """Remove an event from the venue. The event survives as Unscheduled."""
    await engine.unschedule(venue_id, event_id)
    return MessageResponse(message="Event removed from venue successfully")
