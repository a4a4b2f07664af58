"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
Process-level wiring for the fetch job.

- Logging setup for every entry point
- Builds a FetchOrchestrator from AppConfig
- Runs cycles at a fixed interval in continuous mode
- Handles signals (SIGINT, SIGTERM) for a clean stop

============================================================
ARCHITECTURAL POSITION
============================================================
- No ingestion logic here; one cycle is FetchOrchestrator's job
- Cycles never overlap: the scheduler awaits each one, and
  the orchestrator's own lock serializes any other caller

============================================================
"""

import asyncio
import json
import logging
import signal
import sys
from typing import Optional

import httpx
from sqlalchemy.engine import Engine

from core.clock import ClockProtocol, SystemClock
from core.config import AppConfig
from data_ingestion.collectors import HydroPageCollector
from data_ingestion.ingestion_service import FetchOrchestrator
from data_ingestion.types import HydroSourceConfig
from data_retention import create_retention_manager
from database.engine import create_database_engine, get_session_factory


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
) -> logging.Logger:
    """
    Set up process logging.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    return logging.getLogger("orchestrator")


# ============================================================
# FACTORIES
# ============================================================

def build_source_config(config: AppConfig) -> HydroSourceConfig:
    return HydroSourceConfig(
        url=config.data_url,
        timeout_seconds=config.fetch_timeout_seconds,
        user_agent=config.user_agent,
    )


def create_fetch_orchestrator(
    config: AppConfig,
    engine: Optional[Engine] = None,
    clock: Optional[ClockProtocol] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FetchOrchestrator:
    """
    Factory function to create a fully wired FetchOrchestrator.

    Args:
        config: Application settings
        engine: Database engine (created from config when None)
        clock: Civil clock (system clock in the source zone when None)
        transport: httpx transport override

    Returns:
        Configured FetchOrchestrator
    """
    engine = engine or create_database_engine(config.database_url)
    clock = clock or SystemClock(config.source_timezone)
    session_factory = get_session_factory(engine)

    return FetchOrchestrator(
        collector=HydroPageCollector(build_source_config(config), transport=transport),
        session_factory=session_factory,
        clock=clock,
        retention_manager=create_retention_manager(
            session_factory=session_factory,
            clock=clock,
            retention_days=config.retention_days,
        ),
    )


# ============================================================
# SCHEDULER
# ============================================================

class FetchScheduler:
    """
    Runs fetch cycles at a fixed interval until stopped.

    A failed cycle is already recorded in the fetch log; the
    scheduler only waits for the next tick.
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        interval_seconds: int,
    ) -> None:
        self._orchestrator = orchestrator
        self._interval_seconds = interval_seconds
        self._logger = logging.getLogger("orchestrator.scheduler")
        self._stop_event: Optional[asyncio.Event] = None
        self._cycles_run = 0

    @property
    def cycles_run(self) -> int:
        return self._cycles_run

    async def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """
        Run the main execution loop.

        Args:
            max_cycles: Stop after this many cycles (None: until stopped)
        """
        self._stop_event = asyncio.Event()
        self._install_signal_handlers()

        self._logger.info(f"Starting fetch loop | interval={self._interval_seconds}s")

        try:
            while not self._stop_event.is_set():
                result = await self._orchestrator.run_cycle()
                self._cycles_run += 1

                if not result.succeeded:
                    self._logger.warning(f"Cycle {self._cycles_run} failed: {result.error}")

                if max_cycles is not None and self._cycles_run >= max_cycles:
                    break

                await self._wait_for_next_tick()
        finally:
            self._restore_signal_handlers()
            self._logger.info(f"Fetch loop stopped after {self._cycles_run} cycles")

    def stop(self) -> None:
        """Request the loop to stop after the current cycle."""
        if self._stop_event is not None:
            self._stop_event.set()

    async def _wait_for_next_tick(self) -> None:
        self._logger.debug(f"Waiting {self._interval_seconds}s until next cycle")
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_seconds)
        except asyncio.TimeoutError:
            pass

    # --------------------------------------------------------
    # Signal Handlers
    # --------------------------------------------------------

    def _install_signal_handlers(self) -> None:
        if sys.platform == "win32":
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._on_signal, sig)

    def _restore_signal_handlers(self) -> None:
        if sys.platform == "win32":
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        self._logger.info(f"Received signal {sig.name}")
        self.stop()


__all__ = [
    "FetchScheduler",
    "build_source_config",
    "create_fetch_orchestrator",
    "setup_logging",
]
