"""
Data Ingestion - Record Builder.

============================================================
RESPONSIBILITY
============================================================
Turns extracted table rows into MeasurementRecords.

- Timestamp is mandatory; a row without one is skipped
- Each measured value parses independently; any of them may
  be None and the record is still valid
- Every row keeps a diagnostic entry, whatever the outcome
- Source order is preserved

============================================================
"""

import dataclasses
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from data_ingestion.normalizers.value_parser import (
    parse_datetime,
    parse_numeric_value,
)
from data_ingestion.types import (
    BuildResult,
    MeasurementRecord,
    RawRow,
    RowStatus,
    SkipReason,
)


logger = logging.getLogger(__name__)


def _as_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _parsed_view(record: MeasurementRecord) -> Dict[str, Any]:
    return {
        "dateTime": (
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S")
            if record.timestamp else None
        ),
        "level": _as_float(record.water_level),
        "flow": _as_float(record.flow_rate),
        "temperature": _as_float(record.temperature),
    }


def build_record(row: RawRow) -> Tuple[RawRow, Optional[MeasurementRecord]]:
    """
    Build the record for one candidate row.

    Returns:
        The row annotated with its outcome, and the record (None
        when the timestamp cannot be parsed)
    """
    date_time, level, flow, temperature = row.fields
    record = MeasurementRecord(
        timestamp=parse_datetime(date_time),
        water_level=parse_numeric_value(level),
        flow_rate=parse_numeric_value(flow),
        temperature=parse_numeric_value(temperature),
    )

    if record.timestamp is None:
        skipped = dataclasses.replace(
            row,
            status=RowStatus.SKIPPED,
            reason=SkipReason.BAD_DATETIME.value,
            parsed=_parsed_view(record),
        )
        return skipped, None

    added = dataclasses.replace(row, status=RowStatus.ADDED, parsed=_parsed_view(record))
    return added, record


def build_records(rows: Iterable[RawRow]) -> BuildResult:
    """
    Build records from extractor output.

    Rows already skipped by the extractor pass through unchanged
    into the diagnostics.
    """
    records: List[MeasurementRecord] = []
    diagnostics: List[RawRow] = []

    for row in rows:
        if not row.is_candidate:
            diagnostics.append(row)
            continue

        outcome, record = build_record(row)
        diagnostics.append(outcome)

        if record is not None:
            records.append(record)
        else:
            logger.debug(f"Row {row.row_number} skipped: {outcome.reason}")

    return BuildResult(records=tuple(records), diagnostics=tuple(diagnostics))
