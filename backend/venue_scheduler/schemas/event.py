"""
Pydantic schemas for event-related request/response validation.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from venue_scheduler.models.event import Event


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=1000)
    organizer: str = Field("", max_length=255)
    price: float = Field(0, ge=0)


class EventUpdate(BaseModel):
    """
    Partial edit. Only fields present in the request body are applied.
    `status` is accepted here so the engine can reject it with a clear
    message instead of a schema error.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    organizer: Optional[str] = Field(None, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    status: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", "description", "organizer", "price")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class EventListResponse(BaseModel):
    events: list[Event]
    total: int


class EventLocationResponse(BaseModel):
    event_id: str
    venue_id: str
    message: str


class MessageResponse(BaseModel):
    message: str
