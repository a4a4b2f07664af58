"""
Tests for the value parser.

============================================================
COVERAGE
============================================================
- Source date-time parsing and formatting
- Decimal-comma numbers and placeholders
- Display rendering used by the read API

============================================================
"""

from datetime import datetime
from decimal import Decimal

import pytest

from data_ingestion.normalizers.value_parser import (
    format_datetime,
    format_decimal,
    parse_datetime,
    parse_numeric_value,
)


# ============================================================
# DATE-TIME
# ============================================================

class TestParseDatetime:
    """Tests for parse_datetime."""

    def test_parses_source_format(self):
        assert parse_datetime("20.05.2024 10:00") == datetime(2024, 5, 20, 10, 0)

    def test_tolerates_surrounding_whitespace(self):
        assert parse_datetime("  01.12.2023   07:30 ") == datetime(2023, 12, 1, 7, 30)

    @pytest.mark.parametrize("text", [
        "20.05.2024 10:00",
        "01.01.2025 00:00",
        "29.02.2024 23:50",
    ])
    def test_round_trips_through_format(self, text):
        assert format_datetime(parse_datetime(text)) == text

    @pytest.mark.parametrize("text", [
        "",
        None,
        "Datum",
        "2024-05-20 10:00",
        "20.5.2024 10:00",
        "20.05.24 10:00",
        "20.05.2024",
        "20.05.202410:00",
    ])
    def test_other_shapes_are_unparseable(self, text):
        assert parse_datetime(text) is None

    def test_calendar_invalid_date_is_unparseable(self):
        assert parse_datetime("31.02.2024 10:00") is None
        assert parse_datetime("20.05.2024 25:00") is None


# ============================================================
# NUMBERS
# ============================================================

class TestParseNumericValue:
    """Tests for parse_numeric_value."""

    def test_dash_means_no_measurement(self):
        assert parse_numeric_value("-") is None

    def test_empty_means_no_measurement(self):
        assert parse_numeric_value("") is None
        assert parse_numeric_value("   ") is None

    def test_decimal_comma(self):
        assert parse_numeric_value("12,5") == Decimal("12.5")

    def test_integer_and_point(self):
        assert parse_numeric_value("350") == Decimal("350")
        assert parse_numeric_value(" 15.3 ") == Decimal("15.3")

    def test_negative(self):
        assert parse_numeric_value("-0,4") == Decimal("-0.4")

    @pytest.mark.parametrize("text", ["abc", "12,5 cm", "1,2,3", "--", "NaN", "inf"])
    def test_non_numbers(self, text):
        assert parse_numeric_value(text) is None

    def test_none(self):
        assert parse_numeric_value(None) is None


# ============================================================
# DISPLAY RENDERING
# ============================================================

class TestFormatDecimal:
    """Tests for format_decimal."""

    def test_level_without_decimals(self):
        assert format_decimal(Decimal("350.00"), 0) == "350"

    def test_flow_with_comma(self):
        assert format_decimal(Decimal("12.5"), 2) == "12,50"

    def test_temperature_with_point(self):
        assert format_decimal(Decimal("15.25"), 1, decimal_separator=".") == "15.3"

    def test_rounds_half_up(self):
        assert format_decimal(Decimal("0.125"), 2) == "0,13"
        assert format_decimal(Decimal("2.5"), 0) == "3"

    def test_missing_renders_dash(self):
        assert format_decimal(None, 2) == "-"
