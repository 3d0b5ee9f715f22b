from venue_scheduler.schemas.venue import VenueCreate, VenueUpdate, VenueListResponse
from venue_scheduler.schemas.event import (
    EventCreate, EventUpdate, EventListResponse, EventLocationResponse, MessageResponse,
)
from venue_scheduler.schemas.consistency import InvariantViolation, ConsistencyReport

__all__ = [
    "VenueCreate", "VenueUpdate", "VenueListResponse",
    "EventCreate", "EventUpdate", "EventListResponse", "EventLocationResponse", "MessageResponse",
    "InvariantViolation", "ConsistencyReport",
]
