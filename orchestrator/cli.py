"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the fetch job.

- One cycle and exit (cron style), the default
- Continuous loop at a fixed interval
- Debug mode: row-by-row trace, nothing persisted
- Schema bootstrap

The cycle outcome is printed as JSON on stdout; logs go to
the logging handler. Exit code is 1 when the cycle failed.

============================================================
USAGE
============================================================
hydro-fetch
hydro-fetch --debug
hydro-fetch --loop --interval 1800
hydro-fetch --init-db

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from core.config import AppConfig
from data_ingestion.types import FetchError
from database.engine import (
    DatabasePersistenceError,
    create_database_engine,
    init_db,
)

from .core import FetchScheduler, create_fetch_orchestrator, setup_logging


logger = logging.getLogger("orchestrator.cli")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hydro-fetch",
        description="Fetch hydrological measurements and store new records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run one cycle and exit
  %(prog)s --debug                  # Print the parse trace, store nothing
  %(prog)s --loop --interval 1800   # Run every 30 minutes
  %(prog)s --init-db                # Create tables and exit
        """
    )

    # --------------------------------------------------------
    # Execution Options
    # --------------------------------------------------------
    execution_group = parser.add_argument_group("Execution Options")

    mode = execution_group.add_mutually_exclusive_group()
    mode.add_argument(
        "--debug",
        action="store_true",
        help="Fetch and parse only; print the row-by-row trace as JSON",
    )
    mode.add_argument(
        "--loop",
        action="store_true",
        help="Run cycles continuously instead of once",
    )
    mode.add_argument(
        "--init-db",
        action="store_true",
        help="Create the database tables and exit",
    )

    execution_group.add_argument(
        "--interval",
        type=int,
        default=None,
        metavar="SECONDS",
        help="Loop interval in seconds (default: FETCH_INTERVAL_SECONDS or 1800)",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )

    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default=None,
        help="Log format (default: LOG_FORMAT or text)",
    )

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    """
    Validate argument combinations.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if args.interval is not None:
        if not args.loop:
            errors.append("--interval requires --loop")
        elif args.interval < 1:
            errors.append("--interval must be at least 1 second")

    return errors


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def _print_json(payload: dict, pretty: bool = False) -> None:
    print(json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False))


async def async_main(args: argparse.Namespace, config: AppConfig) -> int:
    """
    Async main entry point.

    Returns:
        Exit code
    """
    engine = create_database_engine(config.database_url)

    try:
        # No connection is opened until init_db; --debug never gets there.
        orchestrator = create_fetch_orchestrator(config, engine=engine)

        if args.debug:
            try:
                trace = await orchestrator.inspect()
            except FetchError as e:
                _print_json({"success": False, "error": str(e)})
                return 1
            _print_json(trace.to_dict(), pretty=True)
            return 0

        init_db(engine)
        if args.init_db:
            return 0

        if args.loop:
            scheduler = FetchScheduler(
                orchestrator,
                interval_seconds=args.interval or config.fetch_interval_seconds,
            )
            await scheduler.run_forever()
            return 0

        result = await orchestrator.run_cycle()
        _print_json(result.to_dict())
        return 0 if result.succeeded else 1

    except DatabasePersistenceError as e:
        logger.error(f"Database unavailable: {e}")
        return 1
    finally:
        engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        config = AppConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level=args.log_level or config.log_level,
        log_format=args.log_format or config.log_format,
    )

    try:
        return asyncio.run(async_main(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
