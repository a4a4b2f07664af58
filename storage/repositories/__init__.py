"""
Repository Layer Package.

============================================================
PURPOSE
============================================================
The Repository Layer is the ONLY gateway to persistent storage.
All database access goes through repository classes.

============================================================
ARCHITECTURE PRINCIPLES
============================================================
1. Session Injection: Sessions are injected, not created internally
2. Explicit Methods: clear method names, no generic 'execute'
3. Append-only fetch log
4. Exception Handling: All DB errors wrapped in repository exceptions

============================================================
USAGE
============================================================

    from storage.repositories import MeasurementRepository

    repo = MeasurementRepository(session)
    if repo.upsert(record):
        session.commit()

============================================================
"""

from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    IntegrityError,
    QueryError,
    RepositoryException,
    TransactionError,
)
from storage.repositories.measurements import (
    FetchLogRepository,
    MeasurementRepository,
)


__all__ = [
    "BaseRepository",
    "FetchLogRepository",
    "MeasurementRepository",
    # Exceptions
    "ConnectionError",
    "DuplicateRecordError",
    "IntegrityError",
    "QueryError",
    "RepositoryException",
    "TransactionError",
]
