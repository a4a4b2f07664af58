"""
Hydrological Repositories.

============================================================
REPOSITORIES
============================================================
- MeasurementRepository: observations keyed by timestamp
  (upsert, latest timestamp, recency queries, purge)
- FetchLogRepository: append-only ingestion outcomes

============================================================
UPSERT SEMANTICS
============================================================
Writing a timestamp that already exists overwrites the three
measured values. ``upsert`` reports True only when a row was
inserted or a value actually changed, so re-sending identical
data counts as nothing written.

PostgreSQL and SQLite use INSERT .. ON CONFLICT DO UPDATE with a
change predicate; other backends fall back to read-compare-write
through the ORM.

============================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, desc, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from data_ingestion.types import FetchStatus, MeasurementRecord
from storage.models.hydro import FetchLog, Measurement
from storage.repositories.base import BaseRepository


MEASURED_COLUMNS = ("water_level", "flow_rate", "temperature")

_ON_CONFLICT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _differs(current: Optional[Decimal], new: Optional[Decimal]) -> bool:
    if current is None or new is None:
        return current is not new
    return Decimal(current) != Decimal(new)


class MeasurementRepository(BaseRepository[Measurement]):
    """
    Repository for hydrological measurements.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, Measurement, "MeasurementRepository")

    # =========================================================
    # WRITE OPERATIONS
    # =========================================================

    def upsert(self, record: MeasurementRecord) -> bool:
        """
        Insert or overwrite the measurement for ``record.timestamp``.

        The caller owns the transaction (commit / rollback).

        Returns:
            True if a row was inserted or changed
        """
        dialect = self._session.get_bind().dialect.name
        try:
            insert_factory = _ON_CONFLICT_INSERTS.get(dialect)
            if insert_factory is not None:
                return self._upsert_on_conflict(insert_factory, record)
            return self._upsert_compare(record)
        except SQLAlchemyError as e:
            self._handle_db_error(e, "upsert", {"timestamp": str(record.timestamp)})
            raise

    def _upsert_on_conflict(self, insert_factory, record: MeasurementRecord) -> bool:
        table = Measurement.__table__
        stmt = insert_factory(table).values(
            timestamp=record.timestamp,
            **record.values(),
        )
        excluded = stmt.excluded
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.timestamp],
            set_={name: excluded[name] for name in MEASURED_COLUMNS},
            where=or_(*(
                table.c[name].is_distinct_from(excluded[name])
                for name in MEASURED_COLUMNS
            )),
        )
        result = self._session.execute(stmt)
        return result.rowcount > 0

    def _upsert_compare(self, record: MeasurementRecord) -> bool:
        existing = self._session.get(Measurement, record.timestamp)
        if existing is None:
            self._session.add(Measurement(timestamp=record.timestamp, **record.values()))
            self._session.flush()
            return True

        changed = False
        for name, value in record.values().items():
            if _differs(getattr(existing, name), value):
                setattr(existing, name, value)
                changed = True
        if changed:
            self._session.flush()
        return changed

    def delete_older_than(self, cutoff: datetime) -> int:
        """
        Delete measurements strictly older than ``cutoff``.

        Returns:
            Number of rows deleted
        """
        try:
            table = Measurement.__table__
            result = self._session.execute(
                delete(table).where(table.c.timestamp < cutoff)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            self._handle_db_error(e, "delete_older_than", {"cutoff": str(cutoff)})
            raise

    # =========================================================
    # READ OPERATIONS
    # =========================================================

    def get_latest_timestamp(self) -> Optional[datetime]:
        """
        Get the most recent persisted timestamp, None if empty.
        """
        return self._execute_scalar(select(func.max(Measurement.timestamp)))

    def get(self, timestamp: datetime) -> Optional[Measurement]:
        """
        Get the measurement at an exact timestamp.
        """
        return self._execute_scalar(
            select(Measurement).where(Measurement.timestamp == timestamp)
        )

    def list_recent(
        self,
        limit: int = 100,
        since: Optional[datetime] = None,
    ) -> List[Measurement]:
        """
        List measurements most-recent-first.

        Args:
            limit: Maximum rows returned
            since: Only rows at or after this timestamp
        """
        stmt = select(Measurement)
        if since is not None:
            stmt = stmt.where(Measurement.timestamp >= since)
        stmt = stmt.order_by(desc(Measurement.timestamp)).limit(limit)
        return self._execute_query(stmt)


class FetchLogRepository(BaseRepository[FetchLog]):
    """
    Repository for the append-only fetch log.

    There are no update or delete operations.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, FetchLog, "FetchLogRepository")

    def append(
        self,
        fetch_time: datetime,
        status: FetchStatus,
        records_inserted: int = 0,
        error_message: Optional[str] = None,
    ) -> FetchLog:
        """
        Append one cycle outcome.

        ``error_message`` is dropped for successful cycles.
        """
        entity = FetchLog(
            fetch_time=fetch_time,
            status=FetchStatus(status).value,
            records_inserted=records_inserted,
            error_message=error_message if status == FetchStatus.ERROR else None,
        )
        return self._add(entity)

    def get_latest(self) -> Optional[FetchLog]:
        """
        Get the most recent entry.
        """
        stmt = (
            select(FetchLog)
            .order_by(desc(FetchLog.fetch_time), desc(FetchLog.id))
            .limit(1)
        )
        return self._execute_scalar(stmt)

    def list_recent(self, limit: int = 20) -> List[FetchLog]:
        stmt = (
            select(FetchLog)
            .order_by(desc(FetchLog.fetch_time), desc(FetchLog.id))
            .limit(limit)
        )
        return self._execute_query(stmt)
