"""
Storage Package.

Persistence for measurements and the fetch log.

Modules:
- models/: ORM models
- repositories/: Data access layer
"""

from storage.models import Base, FetchLog, Measurement
from storage.repositories import FetchLogRepository, MeasurementRepository


__all__ = [
    "Base",
    "FetchLog",
    "FetchLogRepository",
    "Measurement",
    "MeasurementRepository",
]
