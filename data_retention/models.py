"""
Data Retention Models.

============================================================
PURPOSE
============================================================
Retention window for the measurement store.

The store is a bounded sliding window, not an archive:
measurements older than the window are purged every cycle.
The fetch log is append-only and is never purged.

============================================================
BOUNDARY
============================================================
Exclusive: a timestamp is expired only when it is strictly
older than ``now - window``. A row exactly at the boundary is
kept until the next cycle.

============================================================
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


DEFAULT_RETENTION_DAYS = 7


@dataclass(frozen=True)
class RetentionDuration:
    """Concrete retention duration."""
    days: Optional[int] = None
    indefinite: bool = False

    def __post_init__(self):
        if not self.indefinite and self.days is None:
            raise ValueError("Must specify days or set indefinite=True")
        if self.indefinite and self.days is not None:
            raise ValueError("Cannot specify days when indefinite=True")
        if self.days is not None and self.days < 1:
            raise ValueError(f"Retention days must be >= 1, got {self.days}")

    @classmethod
    def trailing_week(cls) -> "RetentionDuration":
        return cls(days=DEFAULT_RETENTION_DAYS)

    @classmethod
    def forever(cls) -> "RetentionDuration":
        return cls(indefinite=True)

    def cutoff(self, now: datetime) -> Optional[datetime]:
        """Oldest timestamp still retained, None when indefinite."""
        if self.indefinite:
            return None
        return now - timedelta(days=self.days)

    def is_expired(self, timestamp: datetime, now: datetime) -> bool:
        """Check if a timestamp falls outside the window."""
        cutoff = self.cutoff(now)
        if cutoff is None:
            return False
        return timestamp < cutoff
