"""
Database Query Services for the read API.

============================================================
RENDERING
============================================================
Numeric values leave the store as Decimals and are rendered to
display strings only here:

- level: 0 decimals, decimal comma
- flow: 2 decimals, decimal comma
- temperature: 1 decimal, decimal POINT

The temperature separator differs on purpose: the browser
chart parses temperature with parseFloat. Missing values
render as "-".

============================================================
"""
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from core.clock import CIVIL_FORMAT, ClockProtocol
from data_ingestion.normalizers import format_datetime, format_decimal
from storage.models import FetchLog, Measurement
from storage.repositories import FetchLogRepository, MeasurementRepository

from dashboard.schemas import LastFetch, MeasurementItem, MeasurementsResponse

DEFAULT_LIMIT = 100
MIN_LIMIT = 1
MAX_LIMIT = 500

_FROM_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
)

_INTEGER = re.compile(r"[+-]?\d+")


class InvalidParameterError(ValueError):
    """A query parameter could not be interpreted."""
    pass


def clamp_limit(raw: Optional[str]) -> int:
    """
    Interpret the ``limit`` parameter.

    Absent or non-integer values give the default; integers are
    clamped to [1, 500].
    """
    if raw is None or not _INTEGER.fullmatch(raw.strip()):
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, int(raw.strip())))


def parse_from(raw: Optional[str]) -> Optional[datetime]:
    """
    Interpret the ``from`` parameter as a civil datetime.

    Raises:
        InvalidParameterError: Value matches none of the accepted formats
    """
    if raw is None or raw.strip() == "":
        return None

    value = raw.strip()
    for fmt in _FROM_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise InvalidParameterError(f"Unrecognised 'from' value: {raw!r}")


def render_measurement(measurement: Measurement) -> MeasurementItem:
    return MeasurementItem(
        date_time=format_datetime(measurement.timestamp),
        level=format_decimal(measurement.water_level, 0),
        flow=format_decimal(measurement.flow_rate, 2),
        temperature=format_decimal(measurement.temperature, 1, decimal_separator="."),
    )


def render_last_fetch(entry: Optional[FetchLog]) -> Optional[LastFetch]:
    if entry is None:
        return None
    return LastFetch(
        time=entry.fetch_time.strftime(CIVIL_FORMAT),
        status=entry.status,
        records=entry.records_inserted or 0,
    )


class MeasurementQueryService:
    def __init__(self, session: Session, clock: ClockProtocol):
        self.session = session
        self.clock = clock
        self.measurements = MeasurementRepository(session)
        self.fetch_log = FetchLogRepository(session)

    def get_measurements(
        self,
        limit: int = DEFAULT_LIMIT,
        since: Optional[datetime] = None,
    ) -> MeasurementsResponse:
        """
        Recent measurements, most recent first, plus the last fetch outcome.

        Raises:
            RepositoryException: On database errors
        """
        rows: List[Measurement] = self.measurements.list_recent(limit=limit, since=since)
        data = [render_measurement(row) for row in rows]

        return MeasurementsResponse(
            success=True,
            count=len(data),
            data=data,
            last_fetch=render_last_fetch(self.fetch_log.get_latest()),
            timestamp=self.clock.format_civil(),
        )
