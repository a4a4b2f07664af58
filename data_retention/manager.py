"""
Data Retention Manager.

============================================================
PURPOSE
============================================================
Applies the trailing retention window to the measurement
store after each ingestion cycle.

CRITICAL:
- Retention failure must NOT change the recorded cycle status
  (the caller logs and continues)
- Deletion counts are always logged

============================================================
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from core.clock import ClockProtocol
from storage.repositories import MeasurementRepository, RepositoryException

from .models import RetentionDuration


logger = logging.getLogger(__name__)


class RetentionManager:
    """
    Purges measurements older than the retention window.

    "Now" is the clock's civil time, the same frame the
    measurement timestamps are stored in.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: ClockProtocol,
        duration: Optional[RetentionDuration] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._duration = duration or RetentionDuration.trailing_week()

    @property
    def duration(self) -> RetentionDuration:
        return self._duration

    def purge_expired(self) -> int:
        """
        Delete measurements strictly older than ``now - window``.

        Returns:
            Number of rows deleted

        Raises:
            RepositoryException: On database errors (rolled back)
        """
        cutoff = self._duration.cutoff(self._clock.civil_now())
        if cutoff is None:
            return 0

        session = self._session_factory()
        try:
            repository = MeasurementRepository(session)
            try:
                deleted = repository.delete_older_than(cutoff)
                repository.commit()
            except RepositoryException:
                repository.rollback()
                raise
        finally:
            session.close()

        logger.info(f"Cleaned {deleted} old records (before {cutoff})")
        return deleted


def create_retention_manager(
    session_factory: Callable[[], Session],
    clock: ClockProtocol,
    retention_days: int = 7,
) -> RetentionManager:
    """Create a RetentionManager with a day-based window."""
    return RetentionManager(
        session_factory=session_factory,
        clock=clock,
        duration=RetentionDuration(days=retention_days),
    )
