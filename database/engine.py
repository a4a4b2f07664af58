"""
Database Persistence Layer - Core Engine.

============================================================
RESPONSIBILITY
============================================================
Engine, session factory and schema bootstrap for the
measurement store.

- SQLAlchemy 2.x engine from DATABASE_URL
- Connection pooling for server databases; SQLite works for
  local runs and tests
- Hard failures on persistence errors

============================================================
"""

import logging
from typing import List

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from storage.models import Base


logger = logging.getLogger(__name__)

REQUIRED_TABLES = ["measurements", "fetch_log"]

# =============================================================
# DATABASE ENGINE
# =============================================================


def _safe_url(url: str) -> str:
    return make_url(url).render_as_string(hide_password=True)


def create_database_engine(
    url: str,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    echo: bool = False,
) -> Engine:
    """
    Create a SQLAlchemy engine.

    Pool arguments apply to server databases only. An in-memory
    SQLite URL gets a single shared connection so every session
    sees the same database. No connection is opened here.

    Args:
        url: Database URL
        pool_size: Number of connections to keep in pool
        max_overflow: Max connections beyond pool_size
        pool_timeout: Seconds to wait for available connection
        pool_recycle: Recycle connections after N seconds
        echo: Log SQL statements

    Returns:
        SQLAlchemy Engine
    """
    parsed = make_url(url)

    logger.info(f"Creating database engine for: {_safe_url(url)}")

    if parsed.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
    else:
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            pool_pre_ping=True,
            echo=echo,
        )

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        logger.debug("Database connection established")

    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


# =============================================================
# DATABASE INITIALIZATION
# =============================================================


def init_db(engine: Engine) -> None:
    """
    Create the measurement and fetch-log tables if missing.

    Raises:
        DatabaseInitializationError: Table creation failed
    """
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}")
        raise DatabaseInitializationError(f"Table creation failed: {e}") from e


def verify_required_tables(engine: Engine) -> List[str]:
    """
    Check that the required tables exist.

    Returns:
        Names of missing tables (empty when all exist)
    """
    existing = set(inspect(engine).get_table_names())

    missing = []
    for table in REQUIRED_TABLES:
        if table in existing:
            logger.info(f"  [OK] Table verified: {table}")
        else:
            logger.warning(f"  [!!] Table missing: {table}")
            missing.append(table)
    return missing


# =============================================================
# CUSTOM EXCEPTIONS
# =============================================================


class DatabasePersistenceError(Exception):
    """Raised when database persistence fails."""
    pass


class DatabaseInitializationError(DatabasePersistenceError):
    """Raised when database initialization fails."""
    pass


__all__ = [
    "REQUIRED_TABLES",
    # Engine & Session
    "create_database_engine",
    "get_session_factory",
    # Initialization
    "init_db",
    "verify_required_tables",
    # Exceptions
    "DatabasePersistenceError",
    "DatabaseInitializationError",
]
