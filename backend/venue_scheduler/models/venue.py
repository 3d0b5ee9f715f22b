"""
Venue record held in the venue table of the record store.

Key design decisions:
- `event_ids` holds references by id, never event copies
- Order of `event_ids` is the order events were attached; removal keeps the
  relative order of the rest
- The venue is the only side of the relationship that is stored; an event's
  venue is found by scanning venues
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Venue(BaseModel):
    id: str
    name: str
    event_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    def holds(self, event_id: str) -> bool:
        return event_id in self.event_ids

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name}, events={len(self.event_ids)})>"
