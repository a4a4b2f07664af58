"""
Data Ingestion Package.

This package fetches the hydrological page and turns its
measured-data table into records.

Sub-packages:
- collectors: Page retrieval
- extractors: Measured-data table walk
- normalizers: Value parsing and record building

Modules (import directly, they depend on storage):
- reconciler: Only-newer filter and per-row upsert
- ingestion_service: FetchOrchestrator, one cycle end-to-end
"""

from data_ingestion.collectors import BaseCollector, HydroPageCollector
from data_ingestion.extractors import extract_rows
from data_ingestion.normalizers import (
    build_record,
    build_records,
    format_datetime,
    format_decimal,
    parse_datetime,
    parse_numeric_value,
)
from data_ingestion.types import (
    BuildResult,
    CycleResult,
    DebugTrace,
    FetchError,
    FetchStatus,
    FormatDriftError,
    HydroSourceConfig,
    IngestionError,
    MeasurementRecord,
    RawRow,
    ReconcileResult,
    RowStatus,
    SkipReason,
    StorageError,
    TableExtraction,
)


__all__ = [
    # Collectors
    "BaseCollector",
    "HydroPageCollector",
    # Parsing
    "extract_rows",
    "build_record",
    "build_records",
    "format_datetime",
    "format_decimal",
    "parse_datetime",
    "parse_numeric_value",
    # Types - Enums
    "FetchStatus",
    "RowStatus",
    "SkipReason",
    # Types - Data
    "HydroSourceConfig",
    "MeasurementRecord",
    "RawRow",
    "TableExtraction",
    "BuildResult",
    "ReconcileResult",
    "CycleResult",
    "DebugTrace",
    # Errors
    "IngestionError",
    "FetchError",
    "FormatDriftError",
    "StorageError",
]
