"""
Tests for the fetch orchestrator.

============================================================
COVERAGE
============================================================
- Successful cycle: records written, success entry logged,
  retention applied
- Transport failure and format drift: error entry logged,
  failed result returned
- Zero new records is a success
- Retention and fetch-log failures
- Debug introspection leaves the store untouched

============================================================
"""

import asyncio
from datetime import datetime
from unittest.mock import MagicMock, patch

import httpx
import pytest

from data_ingestion.collectors import HydroPageCollector
from data_ingestion.ingestion_service import FetchOrchestrator
from data_ingestion.types import FetchStatus, HydroSourceConfig
from data_retention import RetentionManager
from storage.models import FetchLog, Measurement
from storage.repositories import FetchLogRepository, QueryError


# ============================================================
# HELPERS
# ============================================================

def _collector(handler) -> HydroPageCollector:
    config = HydroSourceConfig(url="https://hydro.example.test/page")
    return HydroPageCollector(config, transport=httpx.MockTransport(handler))


def _serving(document: str):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=document.encode("utf-8"))
    return handler


def _fetch_log(session_factory):
    session = session_factory()
    try:
        return session.query(FetchLog).order_by(FetchLog.id).all()
    finally:
        session.close()


def _measurement_count(session_factory):
    session = session_factory()
    try:
        return session.query(Measurement).count()
    finally:
        session.close()


@pytest.fixture
def build_orchestrator(session_factory, clock):
    def build(handler, retention=True):
        return FetchOrchestrator(
            collector=_collector(handler),
            session_factory=session_factory,
            clock=clock,
            retention_manager=RetentionManager(session_factory, clock) if retention else None,
        )
    return build


# ============================================================
# SUCCESSFUL CYCLES
# ============================================================

class TestSuccessfulCycle:
    """Cycles that reach the success log entry."""

    @pytest.mark.asyncio
    async def test_writes_records_and_logs_success(
        self, build_orchestrator, make_page, sample_rows, session_factory, clock,
    ):
        orchestrator = build_orchestrator(_serving(make_page(sample_rows)))

        result = await orchestrator.run_cycle()

        assert result.succeeded
        assert result.records_parsed == 3
        assert result.records_inserted == 3
        assert result.fetch_logged
        assert _measurement_count(session_factory) == 3

        entries = _fetch_log(session_factory)
        assert len(entries) == 1
        assert entries[0].status == "success"
        assert entries[0].records_inserted == 3
        assert entries[0].error_message is None
        assert entries[0].fetch_time == clock.civil_now()

    @pytest.mark.asyncio
    async def test_second_cycle_inserts_nothing_but_succeeds(
        self, build_orchestrator, make_page, sample_rows, session_factory,
    ):
        orchestrator = build_orchestrator(_serving(make_page(sample_rows)))

        await orchestrator.run_cycle()
        second = await orchestrator.run_cycle()

        assert second.succeeded
        assert second.records_parsed == 3
        assert second.records_inserted == 0
        assert _measurement_count(session_factory) == 3
        assert [e.records_inserted for e in _fetch_log(session_factory)] == [3, 0]
        assert orchestrator.run_count == 2

    @pytest.mark.asyncio
    async def test_retention_purges_old_rows(
        self, build_orchestrator, make_page, session_factory,
    ):
        # Clock is 20.05.2024 12:00; the window starts 13.05.2024 12:00.
        orchestrator = build_orchestrator(_serving(make_page([
            ["20.05.2024 10:00", "350", "12,50", "15,2"],
            ["13.05.2024 12:00", "340", "11,00", "14,0"],
            ["13.05.2024 11:50", "339", "10,90", "14,0"],
        ])))

        result = await orchestrator.run_cycle()

        assert result.records_inserted == 3
        assert result.records_purged == 1
        assert _measurement_count(session_factory) == 2

    @pytest.mark.asyncio
    async def test_retention_failure_keeps_success(
        self, build_orchestrator, make_page, sample_rows, session_factory,
    ):
        orchestrator = build_orchestrator(_serving(make_page(sample_rows)))

        with patch.object(
            RetentionManager,
            "purge_expired",
            side_effect=QueryError("MeasurementRepository", "delete_older_than", "locked"),
        ):
            result = await orchestrator.run_cycle()

        assert result.succeeded
        assert result.records_purged == 0
        assert [e.status for e in _fetch_log(session_factory)] == ["success"]

    @pytest.mark.asyncio
    async def test_unexpected_retention_error_keeps_success(
        self, build_orchestrator, make_page, sample_rows, session_factory,
    ):
        orchestrator = build_orchestrator(_serving(make_page(sample_rows)))

        with patch.object(RetentionManager, "purge_expired", side_effect=RuntimeError("boom")):
            result = await orchestrator.run_cycle()

        assert result.succeeded
        assert result.records_inserted == 3
        assert result.records_purged == 0
        assert [(e.status, e.records_inserted) for e in _fetch_log(session_factory)] == [
            ("success", 3),
        ]

    @pytest.mark.asyncio
    async def test_without_retention_manager(self, build_orchestrator, make_page, sample_rows):
        orchestrator = build_orchestrator(_serving(make_page(sample_rows)), retention=False)

        result = await orchestrator.run_cycle()

        assert result.succeeded
        assert result.records_purged == 0


# ============================================================
# FAILED CYCLES
# ============================================================

class TestFailedCycle:
    """Cycles that end with an error entry."""

    @pytest.mark.asyncio
    async def test_transport_failure(self, build_orchestrator, session_factory):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        result = await build_orchestrator(handler).run_cycle()

        assert result.status == FetchStatus.ERROR
        assert "unreachable" in result.error
        assert result.fetch_logged

        entries = _fetch_log(session_factory)
        assert len(entries) == 1
        assert entries[0].status == "error"
        assert entries[0].records_inserted == 0
        assert "unreachable" in entries[0].error_message

    @pytest.mark.asyncio
    async def test_non_success_response(self, build_orchestrator, session_factory):
        result = await build_orchestrator(lambda request: httpx.Response(500)).run_cycle()

        assert not result.succeeded
        assert "HTTP 500" in result.error
        assert _fetch_log(session_factory)[0].status == "error"

    @pytest.mark.asyncio
    async def test_table_missing_is_format_drift(
        self, build_orchestrator, make_page, sample_rows, session_factory,
    ):
        page = make_page(sample_rows, container_class="center_text")

        result = await build_orchestrator(_serving(page)).run_cycle()

        assert not result.succeeded
        assert "table not found" in result.error
        assert _measurement_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_zero_parsed_rows_is_error(
        self, build_orchestrator, make_page, session_factory,
    ):
        page = make_page([["Datum", "-", "-", "-"], ["bad", "1", "1", "1"]])

        result = await build_orchestrator(_serving(page)).run_cycle()

        assert not result.succeeded
        assert result.error == "No data parsed from table"
        entries = _fetch_log(session_factory)
        assert entries[0].error_message == "No data parsed from table"

    @pytest.mark.asyncio
    async def test_error_log_failure_is_not_raised(
        self, build_orchestrator, session_factory,
    ):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with patch.object(
            FetchLogRepository,
            "append",
            side_effect=QueryError("FetchLogRepository", "add", "disk full"),
        ):
            result = await build_orchestrator(handler).run_cycle()

        assert not result.succeeded
        assert not result.fetch_logged
        assert _fetch_log(session_factory) == []

    @pytest.mark.asyncio
    async def test_success_log_failure_turns_cycle_into_error(
        self, build_orchestrator, make_page, sample_rows,
    ):
        orchestrator = build_orchestrator(_serving(make_page(sample_rows)))

        with patch.object(
            FetchLogRepository,
            "append",
            side_effect=QueryError("FetchLogRepository", "add", "disk full"),
        ):
            result = await orchestrator.run_cycle()

        assert not result.succeeded
        assert "Cannot append fetch log" in result.error
        assert result.records_inserted == 3

    @pytest.mark.asyncio
    async def test_result_dict(self, build_orchestrator):
        result = await build_orchestrator(lambda request: httpx.Response(404)).run_cycle()

        payload = result.to_dict()

        assert payload["success"] is False
        assert "HTTP 404" in payload["error"]
        assert payload["timestamp"] == "2024-05-20 12:00:00"


# ============================================================
# SERIALIZATION
# ============================================================

class TestCycleSerialization:

    @pytest.mark.asyncio
    async def test_concurrent_cycles_do_not_overlap(
        self, session_factory, clock, make_page, sample_rows,
    ):
        active = 0
        peak = 0
        document = make_page(sample_rows).encode("utf-8")

        collector = MagicMock()
        collector.source_name = "chmi_hydro"
        collector.config = HydroSourceConfig()

        async def fetch_document():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return document

        collector.fetch_document = fetch_document

        orchestrator = FetchOrchestrator(collector, session_factory, clock)

        results = await asyncio.gather(orchestrator.run_cycle(), orchestrator.run_cycle())

        assert peak == 1
        assert [r.records_inserted for r in results] == [3, 0]


# ============================================================
# DEBUG INTROSPECTION
# ============================================================

class TestInspect:
    """Tests for FetchOrchestrator.inspect."""

    @pytest.mark.asyncio
    async def test_trace_without_persistence(
        self, build_orchestrator, make_page, session_factory,
    ):
        page = make_page([
            ["20.05.2024 10:00", "350", "12,50", "15,2"],
            ["20.05.2024 10:10", "-", "-", "15,3"],
            ["Datum", "-", "-", "-"],
            ["x", "y"],
        ])

        trace = await build_orchestrator(_serving(page)).inspect()
        payload = trace.to_dict()

        assert payload["fetch_time"] == "2024-05-20 12:00:00"
        assert payload["table_found"] is True
        assert payload["total_rows_found"] == 5
        assert payload["total_processed"] == 2
        assert [row["status"] for row in payload["rows"]] == [
            "ADDED", "ADDED", "SKIPPED", "SKIPPED",
        ]
        assert payload["rows"][1]["raw_data"] == {
            "dateTime": "20.05.2024 10:10",
            "level": "-",
            "flow": "-",
            "temperature": "15,3",
        }
        assert payload["rows"][1]["parsed_data"]["level"] is None
        assert payload["rows"][3]["reason"] == "insufficient cells (expected 4+)"

        assert _measurement_count(session_factory) == 0
        assert _fetch_log(session_factory) == []

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self, build_orchestrator):
        from data_ingestion.types import FetchError

        with pytest.raises(FetchError):
            await build_orchestrator(lambda request: httpx.Response(502)).inspect()
