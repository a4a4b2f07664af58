"""
Database Package Initialization.

Engine, sessions and schema bootstrap for the measurement store.
ORM models live in ``storage.models``.
"""

from .engine import (
    REQUIRED_TABLES,
    # Engine creation
    create_database_engine,
    # Session management
    get_session_factory,
    # Database initialization
    init_db,
    verify_required_tables,
    # Exceptions
    DatabaseInitializationError,
    DatabasePersistenceError,
)


__all__ = [
    "REQUIRED_TABLES",
    "create_database_engine",
    "get_session_factory",
    "init_db",
    "verify_required_tables",
    "DatabaseInitializationError",
    "DatabasePersistenceError",
]
