"""
Data Ingestion - Fetch Orchestrator.

============================================================
RESPONSIBILITY
============================================================
Drives one ingestion cycle end-to-end.

- Fetch the remote page
- Extract the measured-data table and build records
- Reconcile against the store and write new rows
- Append one fetch-log entry
- Purge measurements outside the retention window

============================================================
DESIGN PRINCIPLES
============================================================
- No business logic - coordination only
- A cycle always ends in a CycleResult, never an exception
- Zero parsed records is format drift (an error); zero NEW
  records is a normal outcome
- Retention failures never change the recorded status
- The error fetch-log entry is best-effort

============================================================
WORKFLOW
============================================================
1. Fetch (FetchError aborts)
2. Extract + build (FormatDriftError aborts)
3. Reconcile (StorageError aborts; row failures do not)
4. Log success with inserted count
5. Retention purge

On abort: log an error entry, return the failed result.

============================================================
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Union

from sqlalchemy.orm import Session

from core.clock import ClockProtocol
from data_ingestion.collectors.base import BaseCollector
from data_ingestion.extractors.table_extractor import extract_rows
from data_ingestion.normalizers.record_builder import build_records
from data_ingestion.reconciler import Reconciler
from data_ingestion.types import (
    BuildResult,
    CycleResult,
    DebugTrace,
    FetchStatus,
    FormatDriftError,
    IngestionError,
    ReconcileResult,
    StorageError,
)
from data_retention.manager import RetentionManager
from storage.repositories import FetchLogRepository, RepositoryException


class FetchOrchestrator:
    """
    Runs ingestion cycles for a single source.

    ============================================================
    USAGE
    ============================================================
    ```python
    orchestrator = FetchOrchestrator(
        collector=HydroPageCollector(source_config),
        session_factory=get_session_factory(engine),
        clock=SystemClock("Europe/Prague"),
        retention_manager=RetentionManager(session_factory, clock),
    )

    result = await orchestrator.run_cycle()
    trace = await orchestrator.inspect()
    ```

    Cycles are serialized: concurrent ``run_cycle`` calls on one
    instance wait for each other.

    ============================================================
    """

    def __init__(
        self,
        collector: BaseCollector,
        session_factory: Callable[[], Session],
        clock: ClockProtocol,
        retention_manager: Optional[RetentionManager] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            collector: Document collector for the source
            session_factory: Factory to create database sessions
            clock: Civil-time clock for fetch times
            retention_manager: Purges old measurements after each
                successful cycle (skipped when None)
        """
        self._collector = collector
        self._session_factory = session_factory
        self._clock = clock
        self._retention_manager = retention_manager
        self._logger = logging.getLogger("ingestion.orchestrator")

        self._cycle_lock = asyncio.Lock()
        self._run_count = 0
        self._last_result: Optional[CycleResult] = None

    @property
    def run_count(self) -> int:
        return self._run_count

    @property
    def last_result(self) -> Optional[CycleResult]:
        return self._last_result

    # =========================================================
    # CYCLE EXECUTION
    # =========================================================

    async def run_cycle(self) -> CycleResult:
        """
        Run one ingestion cycle.

        Returns:
            CycleResult with status success or error
        """
        async with self._cycle_lock:
            result = await self._execute_cycle()
            self._run_count += 1
            self._last_result = result
            return result

    async def _execute_cycle(self) -> CycleResult:
        result = CycleResult(
            source=self._collector.source_name,
            started_at=self._clock.civil_now(),
        )
        self._logger.info(f"Starting fetch cycle for {result.source}")

        try:
            document = await self._collector.fetch_document()

            build = self._parse(document)
            result.records_parsed = len(build.records)

            reconciled = self._reconcile(build)
            result.records_inserted = reconciled.written
            result.records_failed = reconciled.failed

            self._append_fetch_log(
                fetch_time=result.started_at,
                status=FetchStatus.SUCCESS,
                records_inserted=reconciled.written,
            )
            result.fetch_logged = True

            result.records_purged = self._purge()

        except IngestionError as e:
            result.mark_failed(str(e))
            self._logger.error(f"Fetch cycle failed: {e}")
            result.fetch_logged = self._record_failure(result.started_at, str(e))

        except Exception as e:
            result.mark_failed(str(e))
            self._logger.error(f"Unexpected error in fetch cycle: {e}", exc_info=True)
            result.fetch_logged = self._record_failure(result.started_at, str(e))

        result.mark_complete(self._clock.civil_now())

        self._logger.info(
            f"Fetch cycle finished in {result.duration_seconds:.2f}s | "
            f"status={result.status.value} parsed={result.records_parsed} "
            f"inserted={result.records_inserted} purged={result.records_purged}"
        )
        return result

    def _parse(self, document: Union[str, bytes]) -> BuildResult:
        """
        Extract and build records.

        Raises:
            FormatDriftError: Table missing or no records parsed
        """
        extraction = extract_rows(document, self._collector.config)
        if not extraction.table_found:
            raise FormatDriftError(
                message="Measured-data table not found in document",
                source=self._collector.source_name,
            )

        build = build_records(extraction.rows)
        self._logger.info(
            f"Parsed {len(build.records)} records "
            f"({len(build.skipped)} rows skipped of {extraction.total_rows_found})"
        )

        if not build.records:
            raise FormatDriftError(
                message="No data parsed from table",
                source=self._collector.source_name,
                details={"total_rows_found": extraction.total_rows_found},
            )
        return build

    def _reconcile(self, build: BuildResult) -> ReconcileResult:
        """
        Write new records.

        Raises:
            StorageError: The latest persisted timestamp cannot be read
        """
        session = self._session_factory()
        try:
            reconciler = Reconciler(session)
            try:
                latest = reconciler.latest_timestamp()
            except RepositoryException as e:
                raise StorageError(
                    message=f"Cannot read latest timestamp: {e}",
                    source=self._collector.source_name,
                ) from e

            reconciled = reconciler.reconcile(build.records, latest)
        finally:
            session.close()

        self._logger.info(
            f"Inserted/updated {reconciled.written} records"
            + (f", {reconciled.failed} failed" if reconciled.failed else "")
        )
        return reconciled

    def _purge(self) -> int:
        if self._retention_manager is None:
            return 0
        try:
            return self._retention_manager.purge_expired()
        except Exception as e:
            self._logger.error(f"Retention cleanup failed: {e}", exc_info=True)
            return 0

    # =========================================================
    # FETCH LOG
    # =========================================================

    def _append_fetch_log(
        self,
        fetch_time: datetime,
        status: FetchStatus,
        records_inserted: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Append one fetch-log entry in its own transaction.

        Raises:
            StorageError: The entry could not be written
        """
        session = self._session_factory()
        try:
            repository = FetchLogRepository(session)
            repository.append(
                fetch_time=fetch_time,
                status=status,
                records_inserted=records_inserted,
                error_message=error_message,
            )
            repository.commit()
        except RepositoryException as e:
            session.rollback()
            raise StorageError(
                message=f"Cannot append fetch log: {e}",
                source=self._collector.source_name,
            ) from e
        finally:
            session.close()

    def _record_failure(self, fetch_time: datetime, message: str) -> bool:
        """
        Best-effort error entry.

        Returns:
            True if the entry was written
        """
        try:
            self._append_fetch_log(
                fetch_time=fetch_time,
                status=FetchStatus.ERROR,
                error_message=message,
            )
            return True
        except Exception as e:
            self._logger.error(f"Could not record failed fetch: {e}", exc_info=True)
            return False

    # =========================================================
    # DEBUG INTROSPECTION
    # =========================================================

    async def inspect(self) -> DebugTrace:
        """
        Fetch and parse without touching the store.

        Returns:
            DebugTrace with every row's outcome

        Raises:
            FetchError: On transport failure
        """
        fetch_time = self._clock.civil_now()
        document = await self._collector.fetch_document()

        extraction = extract_rows(document, self._collector.config)
        build = build_records(extraction.rows)

        return DebugTrace(
            fetch_time=fetch_time,
            table_found=extraction.table_found,
            total_rows_found=extraction.total_rows_found,
            rows=list(build.diagnostics),
            total_processed=len(build.records),
        )
