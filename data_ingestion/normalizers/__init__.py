"""
Data Ingestion - Normalizers Package.

Normalizers convert raw cell text into typed records.

Normalizers:
- value_parser: date-time and decimal-comma value parsing
- record_builder: raw rows -> MeasurementRecords
"""

from data_ingestion.normalizers.record_builder import build_record, build_records
from data_ingestion.normalizers.value_parser import (
    format_datetime,
    format_decimal,
    parse_datetime,
    parse_numeric_value,
)


__all__ = [
    "build_record",
    "build_records",
    "format_datetime",
    "format_decimal",
    "parse_datetime",
    "parse_numeric_value",
]
