"""
Pydantic schemas for venue-related request/response validation.
"""

from pydantic import BaseModel, Field

from venue_scheduler.models.venue import Venue


class VenueCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class VenueUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class VenueListResponse(BaseModel):
    venues: list[Venue]
    total: int
