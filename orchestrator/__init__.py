"""
Orchestrator Package.

Entry point wiring for the fetch job: logging, the scheduled
loop and the command-line interface.

Usage:
    python -m orchestrator --loop
"""

from .core import (
    FetchScheduler,
    build_source_config,
    create_fetch_orchestrator,
    setup_logging,
)


__all__ = [
    "FetchScheduler",
    "build_source_config",
    "create_fetch_orchestrator",
    "setup_logging",
]
