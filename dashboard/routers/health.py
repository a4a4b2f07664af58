from fastapi import APIRouter, Depends

from core.clock import ClockProtocol
from dashboard.dependencies import get_clock
from dashboard.schemas import HealthResponse

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("", response_model=HealthResponse)
def get_health(clock: ClockProtocol = Depends(get_clock)):
    """
    Liveness check. Does not touch the database.
    """
    return HealthResponse(status="ok", timestamp=clock.format_civil())
