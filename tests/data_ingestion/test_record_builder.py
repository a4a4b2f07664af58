"""
Tests for the record builder.

============================================================
COVERAGE
============================================================
- Partial data is a valid record
- A bad timestamp drops only its own row
- Source order is preserved
- End-to-end: page -> extractor -> builder

============================================================
"""

from datetime import datetime
from decimal import Decimal

from data_ingestion.extractors import extract_rows
from data_ingestion.normalizers import build_record, build_records
from data_ingestion.types import RawRow, RowStatus, SkipReason


def _candidate(row_number, cells):
    return RawRow(row_number=row_number, cells=tuple(cells))


class TestBuildRecord:
    """Tests for build_record."""

    def test_full_row(self):
        row, record = build_record(_candidate(1, ["20.05.2024 10:00", "350", "12,50", "15,2"]))

        assert record.timestamp == datetime(2024, 5, 20, 10, 0)
        assert record.water_level == Decimal("350")
        assert record.flow_rate == Decimal("12.50")
        assert record.temperature == Decimal("15.2")
        assert row.status == RowStatus.ADDED
        assert row.parsed == {
            "dateTime": "2024-05-20 10:00:00",
            "level": 350.0,
            "flow": 12.5,
            "temperature": 15.2,
        }

    def test_partial_row_is_valid(self):
        _, record = build_record(_candidate(1, ["20.05.2024 10:10", "-", "", "15,3"]))

        assert record is not None
        assert record.water_level is None
        assert record.flow_rate is None
        assert record.temperature == Decimal("15.3")

    def test_all_values_missing_still_a_record(self):
        _, record = build_record(_candidate(1, ["20.05.2024 10:10", "-", "-", "-"]))
        assert record is not None
        assert record.values() == {
            "water_level": None,
            "flow_rate": None,
            "temperature": None,
        }

    def test_bad_datetime(self):
        row, record = build_record(_candidate(4, ["20/05/2024 10:00", "350", "12,50", "15,2"]))

        assert record is None
        assert row.status == RowStatus.SKIPPED
        assert row.reason == SkipReason.BAD_DATETIME.value
        assert row.row_number == 4


class TestBuildRecords:
    """Tests for build_records."""

    def test_one_bad_row_in_ten(self):
        rows = [
            _candidate(i + 1, [f"20.05.2024 {i:02d}:00", "350", "12,50", "15,2"])
            for i in range(10)
        ]
        rows[6] = _candidate(7, ["not a date", "350", "12,50", "15,2"])

        result = build_records(rows)

        assert len(result.records) == 9
        assert len(result.diagnostics) == 10
        assert result.diagnostics[6].status == RowStatus.SKIPPED
        assert result.diagnostics[6].reason == "failed to parse datetime"
        assert [r.status for r in result.diagnostics].count(RowStatus.ADDED) == 9

    def test_order_preserved(self):
        rows = [
            _candidate(1, ["20.05.2024 10:20", "1", "1", "1"]),
            _candidate(2, ["20.05.2024 10:00", "1", "1", "1"]),
            _candidate(3, ["20.05.2024 10:10", "1", "1", "1"]),
        ]

        result = build_records(rows)

        assert [r.timestamp.minute for r in result.records] == [20, 0, 10]

    def test_extractor_skips_pass_through(self):
        skipped = RawRow(
            row_number=1,
            cells=("a",),
            status=RowStatus.SKIPPED,
            reason=SkipReason.INSUFFICIENT_CELLS.value,
        )

        result = build_records([skipped])

        assert result.records == ()
        assert result.diagnostics == (skipped,)
        assert result.skipped == [skipped]


class TestEndToEnd:
    """Page through extractor and builder."""

    def test_header_and_three_rows(self, make_page):
        page = make_page([
            ["20.05.2024 10:00", "350", "12,50", "15,2"],
            ["20.05.2024 10:10", "-", "-", "15,3"],
            ["Datum", "-", "-", "-"],
        ])

        result = build_records(extract_rows(page).rows)

        assert len(result.records) == 2
        second = result.records[1]
        assert second.timestamp == datetime(2024, 5, 20, 10, 10)
        assert second.water_level is None
        assert second.flow_rate is None
        assert second.temperature == Decimal("15.3")

        third = result.diagnostics[2]
        assert third.status == RowStatus.SKIPPED
        assert third.reason == "header or empty row"
