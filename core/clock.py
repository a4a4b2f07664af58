"""
Core Module - Civil Time Clock.

============================================================
RESPONSIBILITY
============================================================
Provides a testable clock for the ingestion pipeline.

- The source publishes timestamps in local civil time
  without an offset, so "now" is expressed the same way
- Used for fetch log entries, retention cutoffs and the
  read API server timestamp
- Mockable for deterministic tests

============================================================
DESIGN PRINCIPLES
============================================================
- One clock instance per process, injected where needed
- Civil datetimes are naive; the zone is fixed by config
- Thread-safe

============================================================
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional
from zoneinfo import ZoneInfo
import threading


DEFAULT_TIMEZONE = "Europe/Prague"
CIVIL_FORMAT = "%Y-%m-%d %H:%M:%S"


# ============================================================
# CLOCK PROTOCOL
# ============================================================

class ClockProtocol(ABC):
    """Abstract interface for the civil-time clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current timezone-aware datetime in the source zone."""
        pass

    def civil_now(self) -> datetime:
        """Get current naive civil datetime (minute data is compared in this form)."""
        return self.now().replace(tzinfo=None)

    def format_civil(self, dt: Optional[datetime] = None) -> str:
        """Format a civil datetime as ``YYYY-MM-DD HH:MM:SS``."""
        dt = dt or self.civil_now()
        return dt.strftime(CIVIL_FORMAT)


# ============================================================
# SYSTEM CLOCK (PRODUCTION)
# ============================================================

class SystemClock(ClockProtocol):
    """
    Production clock using actual system time.

    Wall time is converted into the configured source zone.
    """

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE):
        self._tz = ZoneInfo(tz_name)

    @property
    def tz_name(self) -> str:
        return self._tz.key

    def now(self) -> datetime:
        """Get current datetime in the source zone."""
        return datetime.now(timezone.utc).astimezone(self._tz)


# ============================================================
# MOCK CLOCK (TESTING)
# ============================================================

class MockClock(ClockProtocol):
    """
    Mock clock for testing.

    Naive datetimes passed in are taken as civil time in the
    configured zone.
    """

    def __init__(
        self,
        initial_time: Optional[datetime] = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._tz = ZoneInfo(tz_name)
        self._time = self._localize(initial_time or datetime.now(self._tz))
        self._lock = threading.Lock()

    def _localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self._tz)
        return value.astimezone(self._tz)

    def now(self) -> datetime:
        """Get current (mocked) datetime."""
        with self._lock:
            return self._time

    def set_time(self, new_time: datetime) -> None:
        """Set the current time."""
        with self._lock:
            self._time = self._localize(new_time)

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """
        Advance time by the specified amount.

        Args:
            seconds: Number of seconds to advance
            **kwargs: Passed to timedelta (hours, minutes, days, etc.)
        """
        with self._lock:
            self._time = self._time + timedelta(seconds=seconds, **kwargs)

    @contextmanager
    def freeze(self, at_time: datetime) -> Generator[None, None, None]:
        """Temporarily pin the clock to ``at_time``."""
        with self._lock:
            original_time = self._time
            self._time = self._localize(at_time)

        try:
            yield
        finally:
            with self._lock:
                self._time = original_time
