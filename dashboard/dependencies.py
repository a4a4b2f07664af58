"""
FastAPI dependencies shared by the routers.

The session factory and clock are stored on ``app.state`` by
``create_app``.
"""
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from core.clock import ClockProtocol


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_clock(request: Request) -> ClockProtocol:
    return request.app.state.clock
