"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from venue_scheduler.api.routes import venues, events, admin

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(venues.router)
api_router.include_router(events.router)
api_router.include_router(admin.router)
