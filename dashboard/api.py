"""
Dashboard - Read API.

============================================================
RESPONSIBILITY
============================================================
HTTP read access to the measurement store for the browser
dashboard.

- GET /measurements: recent history plus last fetch outcome
- GET /health: liveness
- Open CORS for GET, caching disabled on every response
- Read-only; safe for any number of concurrent requests

============================================================
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.clock import ClockProtocol, SystemClock
from core.config import AppConfig
from dashboard.routers import health, measurements
from dashboard.schemas import ErrorResponse
from database.engine import create_database_engine, get_session_factory

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def create_app(
    session_factory: Optional[Callable[[], Session]] = None,
    clock: Optional[ClockProtocol] = None,
    config: Optional[AppConfig] = None,
) -> FastAPI:
    """
    Build the read API application.

    Args:
        session_factory: Session factory (built from config when None)
        clock: Clock for the response timestamp (system clock in the
            configured zone when None)
        config: Settings (read from the environment when needed)

    Returns:
        FastAPI application
    """
    if session_factory is None or clock is None:
        config = config or AppConfig.from_env()
    if session_factory is None:
        session_factory = get_session_factory(create_database_engine(config.database_url))
    if clock is None:
        clock = SystemClock(config.source_timezone)

    app = FastAPI(
        title="Hydro Monitor API",
        description="Recent water level, flow and temperature measurements.",
        version="1.0.0",
    )
    app.state.session_factory = session_factory
    app.state.clock = clock

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def disable_caching(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"API Error: {exc}", exc_info=True)
        body = ErrorResponse(error="Server error", message=str(exc))
        return JSONResponse(
            status_code=500,
            content=body.model_dump(),
            headers=NO_CACHE_HEADERS,
        )

    app.include_router(measurements.router)
    app.include_router(health.router)

    @app.get("/", include_in_schema=False)
    def root():
        return {"service": "Hydro Monitor API", "docs": "/docs"}

    return app
