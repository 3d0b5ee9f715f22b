"""
Shared route dependencies.
"""

from fastapi import Request

from venue_scheduler.services.scheduling_engine import SchedulingEngine


def get_engine(request: Request) -> SchedulingEngine:
    """The engine built at startup. Overridden in tests."""
    return request.app.state.engine
