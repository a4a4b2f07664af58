import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.clock import ClockProtocol
from dashboard.dependencies import get_clock, get_db
from dashboard.schemas import ErrorResponse, MeasurementsResponse
from dashboard.services import (
    InvalidParameterError,
    MeasurementQueryService,
    clamp_limit,
    parse_from,
)
from storage.repositories import RepositoryException

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Measurements"])

def _error(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())

@router.get(
    "/measurements",
    response_model=MeasurementsResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_measurements(
    limit: Optional[str] = Query(None, description="Max rows, clamped to 1..500"),
    from_: Optional[str] = Query(None, alias="from", description="Only rows at or after"),
    db: Session = Depends(get_db),
    clock: ClockProtocol = Depends(get_clock),
):
    """
    Recent measurements, most recent first, with the last fetch outcome.
    """
    try:
        since = parse_from(from_)
    except InvalidParameterError as e:
        return _error(400, "Invalid parameter", str(e))

    service = MeasurementQueryService(db, clock)
    try:
        return service.get_measurements(limit=clamp_limit(limit), since=since)
    except RepositoryException as e:
        logger.error(f"API Error: {e}")
        return _error(500, "Database error", str(e))
