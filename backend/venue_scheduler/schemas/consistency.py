"""
Pydantic schemas for the consistency audit report.
"""

from typing import Optional
from pydantic import BaseModel


class InvariantViolation(BaseModel):
    kind: str
    message: str
    venue_id: Optional[str] = None
    event_id: Optional[str] = None


class ConsistencyReport(BaseModel):
    consistent: bool
    venues_checked: int
    events_checked: int
    violations: list[InvariantViolation]
