"""
Data Ingestion - Reconciler / Store Writer.

============================================================
RESPONSIBILITY
============================================================
Decides which parsed records are new and writes them.

- Only records strictly newer than the latest persisted
  timestamp are retained (the page always returns the full
  recent window, so this is the deduplication step)
- Each retained record is upserted in its own transaction
- A failing row is logged and skipped; the rest still land

============================================================
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from data_ingestion.types import MeasurementRecord, ReconcileResult
from storage.repositories import MeasurementRepository, RepositoryException


logger = logging.getLogger(__name__)


def filter_newer(
    records: Iterable[MeasurementRecord],
    latest: Optional[datetime],
) -> List[MeasurementRecord]:
    """
    Keep records strictly newer than ``latest``, in input order.

    Everything is kept when the store is empty (``latest`` None).
    """
    if latest is None:
        return list(records)
    return [record for record in records if record.timestamp > latest]


class Reconciler:
    """
    Writes new measurements to the store.

    The session is injected; the reconciler commits per row.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = MeasurementRepository(session)

    def latest_timestamp(self) -> Optional[datetime]:
        """Most recent persisted timestamp, None when the store is empty."""
        return self._repository.get_latest_timestamp()

    def reconcile(
        self,
        records: Sequence[MeasurementRecord],
        latest: Optional[datetime],
    ) -> ReconcileResult:
        """
        Filter ``records`` against ``latest`` and upsert the rest.

        Args:
            records: Candidate records in source order
            latest: Store's max timestamp before this pass

        Returns:
            ReconcileResult; ``written`` counts inserted or changed rows
        """
        retained = filter_newer(records, latest)

        logger.info(
            f"Records in DB: {f'latest is {latest}' if latest else 'empty'}; "
            f"new records to insert: {len(retained)}"
        )

        written = unchanged = failed = 0

        for record in retained:
            try:
                changed = self._repository.upsert(record)
                self._repository.commit()
            except RepositoryException as e:
                failed += 1
                logger.error(f"Error writing record {record.timestamp}: {e}")
                try:
                    self._repository.rollback()
                except RepositoryException as rollback_error:
                    logger.error(
                        f"Rollback after {record.timestamp} failed: {rollback_error}"
                    )
                continue

            if changed:
                written += 1
                logger.debug(f"Inserted: {record.timestamp}")
            else:
                unchanged += 1

        return ReconcileResult(
            latest_before=latest,
            candidates=len(records),
            retained=len(retained),
            written=written,
            unchanged=unchanged,
            failed=failed,
        )
