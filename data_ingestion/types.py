"""
Data Ingestion - Type Definitions.

============================================================
PURPOSE
============================================================
Shared types for the hydrological ingestion layer.

- Source configuration
- Measurement records and row diagnostics
- Cycle / reconcile result types
- Error types

============================================================
DESIGN PRINCIPLES
============================================================
- Measurement records are immutable
- Missing readings are None, never a placeholder string
- Row-level outcomes are values, not exceptions
- Serializable for logging and the debug trace

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================
# ENUMS
# =============================================================

class FetchStatus(str, Enum):
    """Outcome of one ingestion cycle, as stored in the fetch log."""
    SUCCESS = "success"
    ERROR = "error"


class RowStatus(str, Enum):
    """Per-row outcome while walking the measured-data table."""
    ADDED = "ADDED"
    SKIPPED = "SKIPPED"


class SkipReason(str, Enum):
    """Reasons a table row does not become a record."""
    INSUFFICIENT_CELLS = "insufficient cells (expected 4+)"
    HEADER_OR_EMPTY = "header or empty row"
    BAD_DATETIME = "failed to parse datetime"


# =============================================================
# CONFIGURATION TYPES
# =============================================================

@dataclass(frozen=True)
class HydroSourceConfig:
    """Configuration for the hydrological page collector."""
    source_name: str = "chmi_hydro"
    url: str = "https://hydro.chmi.cz/hppsoldv/hpps_prfdata.php?seq=307338"
    timeout_seconds: int = 30
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # The measured-data table sits in a container carrying both classes;
    # forecast tables on the same page do not.
    container_classes: Tuple[str, ...] = ("tborder", "center_text")
    header_marker: str = "Datum"
    min_cells: int = 4


# =============================================================
# RECORD TYPES
# =============================================================

@dataclass(frozen=True)
class MeasurementRecord:
    """One observation keyed by its civil timestamp."""
    timestamp: datetime
    water_level: Optional[Decimal] = None
    flow_rate: Optional[Decimal] = None
    temperature: Optional[Decimal] = None

    def values(self) -> Dict[str, Optional[Decimal]]:
        """Measured fields keyed by store column name."""
        return {
            "water_level": self.water_level,
            "flow_rate": self.flow_rate,
            "temperature": self.temperature,
        }


@dataclass(frozen=True)
class RawRow:
    """
    Raw cell texts of one table row plus its diagnostic outcome.

    ``status`` is None while the row is still a candidate
    (extracted but not yet built).
    """
    row_number: int
    cells: Tuple[str, ...]
    status: Optional[RowStatus] = None
    reason: Optional[str] = None
    parsed: Optional[Dict[str, Any]] = None

    @property
    def is_candidate(self) -> bool:
        return self.status is None

    @property
    def fields(self) -> Tuple[str, str, str, str]:
        """The four raw fields (datetime, level, flow, temperature)."""
        return self.cells[0], self.cells[1], self.cells[2], self.cells[3]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the debug trace."""
        entry: Dict[str, Any] = {
            "row_number": self.row_number,
            "cells_count": len(self.cells),
        }
        if len(self.cells) >= 4:
            date_time, level, flow, temperature = self.fields
            entry["raw_data"] = {
                "dateTime": date_time,
                "level": level,
                "flow": flow,
                "temperature": temperature,
            }
        if self.parsed is not None:
            entry["parsed_data"] = self.parsed
        if self.status is not None:
            entry["status"] = self.status.value
        if self.reason:
            entry["reason"] = self.reason
        return entry


@dataclass(frozen=True)
class TableExtraction:
    """Output of the table extractor."""
    table_found: bool
    total_rows_found: int = 0
    rows: Tuple[RawRow, ...] = ()

    @property
    def candidates(self) -> List[RawRow]:
        return [row for row in self.rows if row.is_candidate]


@dataclass(frozen=True)
class BuildResult:
    """Output of the record builder."""
    records: Tuple[MeasurementRecord, ...]
    diagnostics: Tuple[RawRow, ...]

    @property
    def skipped(self) -> List[RawRow]:
        return [row for row in self.diagnostics if row.status == RowStatus.SKIPPED]


# =============================================================
# RESULT TYPES
# =============================================================

@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of one reconcile/write pass."""
    latest_before: Optional[datetime]
    candidates: int
    retained: int
    written: int
    unchanged: int
    failed: int


@dataclass
class CycleResult:
    """Result of a single ingestion cycle."""
    source: str = ""
    status: FetchStatus = FetchStatus.SUCCESS

    records_parsed: int = 0
    records_inserted: int = 0
    records_purged: int = 0
    records_failed: int = 0

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    error: Optional[str] = None
    fetch_logged: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    def mark_complete(self, completed_at: datetime) -> None:
        """Mark the cycle as complete and calculate duration."""
        self.completed_at = completed_at
        if self.started_at:
            self.duration_seconds = (completed_at - self.started_at).total_seconds()

    def mark_failed(self, error: str) -> None:
        """Mark the cycle as failed."""
        self.status = FetchStatus.ERROR
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON outcome reported to callers."""
        timestamp = (self.completed_at or self.started_at)
        stamp = timestamp.strftime("%Y-%m-%d %H:%M:%S") if timestamp else None
        if self.status == FetchStatus.ERROR:
            return {
                "success": False,
                "error": self.error,
                "timestamp": stamp,
            }
        return {
            "success": True,
            "records_parsed": self.records_parsed,
            "records_inserted": self.records_inserted,
            "records_purged": self.records_purged,
            "timestamp": stamp,
        }


@dataclass
class DebugTrace:
    """Row-by-row diagnostic trace of one fetch, without persistence."""
    fetch_time: datetime
    table_found: bool = False
    total_rows_found: int = 0
    rows: List[RawRow] = field(default_factory=list)
    total_processed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetch_time": self.fetch_time.strftime("%Y-%m-%d %H:%M:%S"),
            "table_found": self.table_found,
            "total_rows_found": self.total_rows_found,
            "rows": [row.to_dict() for row in self.rows],
            "total_processed": self.total_processed,
        }


# =============================================================
# ERROR TYPES
# =============================================================

class IngestionError(Exception):
    """Base exception for ingestion errors."""

    def __init__(
        self,
        message: str,
        source: str,
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.source = source
        self.recoverable = recoverable
        self.details = details or {}


class FetchError(IngestionError):
    """Error fetching the remote document."""
    pass


class FormatDriftError(IngestionError):
    """The document no longer yields the expected table or records."""
    pass


class StorageError(IngestionError):
    """Error reading from or writing to the store at cycle level."""
    pass
