"""
Event endpoints. Events are created through /venues/{id}/events.
"""

from fastapi import APIRouter, Depends

from venue_scheduler.api.deps import get_engine
from venue_scheduler.models.event import Event
from venue_scheduler.schemas.event import EventListResponse, EventLocationResponse, EventUpdate, MessageResponse
from venue_scheduler.services.scheduling_engine import SchedulingEngine

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(engine: SchedulingEngine = Depends(get_engine)):
    events = await engine.list_events()
    return EventListResponse(events=events, total=len(events))


@router.get("/{event_id}", response_model=Event)
async def get_event_endpoint(event_id: str, engine: SchedulingEngine = Depends(get_engine)):
    return await engine.get_event(event_id)


@router.put("/{event_id}", response_model=Event)
async def edit_event_endpoint(
    event_id: str,
    event_data: EventUpdate,
    engine: SchedulingEngine = Depends(get_engine),
):
    """Edit event details. Only fields sent in the body change; status cannot be edited."""
    return await engine.edit_event(event_id, event_data.model_dump(exclude_unset=True))


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event_endpoint(event_id: str, engine: SchedulingEngine = Depends(get_engine)):
    """Delete an Unscheduled event."""
    await engine.delete_event(event_id)
    return MessageResponse(message="Event deleted successfully")


@router.get("/{event_id}/venue", response_model=EventLocationResponse)
async def find_event_venue_endpoint(event_id: str, engine: SchedulingEngine = Depends(get_engine)):
    """Find the venue an event is scheduled in. Scans all venues."""
    venue_id = await engine.find_venue_of_event(event_id)
    return EventLocationResponse(
        event_id=event_id,
        venue_id=venue_id,
        message=f"The event with id={event_id} is scheduled in venue with id={venue_id}",
    )
