"""
Hydrological Domain ORM Models.

============================================================
MODELS
============================================================
- Measurement: one observation per civil timestamp
  (water level, flow rate, water temperature)
- FetchLog: append-only outcome of each ingestion cycle

============================================================
DATA LIFECYCLE
============================================================
Measurement
- Key: timestamp (natural key, upserted)
- Retention: trailing window, purged every cycle

FetchLog
- Mutability: IMMUTABLE (append-only)
- Retention: indefinite

============================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base


class Measurement(Base):
    """
    One hydrological observation.

    Measured values are nullable: the source shows a dash when a
    sensor did not report.
    """

    __tablename__ = "measurements"

    timestamp: Mapped[datetime] = mapped_column(
        primary_key=True,
        comment="Observation time, source civil time, minute precision"
    )

    water_level: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Water level in cm"
    )

    flow_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 3),
        nullable=True,
        comment="Flow rate in m3/s"
    )

    temperature: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2),
        nullable=True,
        comment="Water temperature in degrees C"
    )

    def __repr__(self) -> str:
        return (
            f"<Measurement {self.timestamp:%Y-%m-%d %H:%M} "
            f"level={self.water_level} flow={self.flow_rate} temp={self.temperature}>"
        )


class FetchLog(Base):
    """
    Outcome of one ingestion cycle.

    Written once per cycle and never modified.
    """

    __tablename__ = "fetch_log"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    fetch_time: Mapped[datetime] = mapped_column(
        nullable=False,
        comment="When the cycle ran (source civil time)"
    )

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="success | error"
    )

    records_inserted: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Rows inserted or changed this cycle"
    )

    error_message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Present only for error cycles"
    )

    __table_args__ = (
        Index("ix_fetch_log_fetch_time", "fetch_time"),
    )

    def __repr__(self) -> str:
        return f"<FetchLog {self.fetch_time:%Y-%m-%d %H:%M:%S} {self.status} n={self.records_inserted}>"
