#!/usr/bin/env python
"""
Read API Server Runner.

Usage:
    python run_dashboard.py
    hydro-api
"""

import logging
import sys

import uvicorn

from core.clock import SystemClock
from core.config import AppConfig
from dashboard.api import create_app
from database.engine import create_database_engine, get_session_factory, init_db
from orchestrator.core import setup_logging


logger = logging.getLogger(__name__)


def main() -> int:
    """Run the read API server."""
    try:
        config = AppConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_format)

    engine = create_database_engine(config.database_url)
    init_db(engine)

    app = create_app(
        session_factory=get_session_factory(engine),
        clock=SystemClock(config.source_timezone),
        config=config,
    )

    logger.info(f"Starting read API on {config.api_host}:{config.api_port}")

    uvicorn.run(
        app,
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.lower(),
        access_log=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
