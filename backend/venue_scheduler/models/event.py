"""
Event record held in the event table of the record store.

Key design decisions:
- `status` is the event's half of the Venue<->Event relationship: Scheduled
  means exactly one venue lists the event, Unscheduled means none does
- No venue id is stored on the event
- `price` is validated non-negative on every construction and assignment
"""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EventStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    UNSCHEDULED = "Unscheduled"


class Event(BaseModel):
    id: str
    name: str
    description: str = ""
    organizer: str = ""
    price: float = Field(default=0, ge=0)
    status: EventStatus = EventStatus.UNSCHEDULED
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"validate_assignment": True}

    @property
    def is_scheduled(self) -> bool:
        return self.status == EventStatus.SCHEDULED

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, status={self.status.value})>"
