"""
Operational endpoints.
"""

from fastapi import APIRouter, Depends

from venue_scheduler.api.deps import get_engine
from venue_scheduler.schemas.consistency import ConsistencyReport
from venue_scheduler.services.scheduling_engine import SchedulingEngine

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/consistency", response_model=ConsistencyReport)
async def consistency_endpoint(engine: SchedulingEngine = Depends(get_engine)):
    """Scan both tables and report every broken Venue<->Event invariant."""
    return await engine.audit()
