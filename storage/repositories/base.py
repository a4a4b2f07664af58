"""
Base Repository Class.

============================================================
PURPOSE
============================================================
Provides common functionality for all repositories:
- Session injection
- Wrapping SQLAlchemy errors in repository exceptions
- Commit / rollback helpers
- Logging setup

============================================================
"""

import logging
from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import (
    IntegrityError as SQLAlchemyIntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from storage.models.base import Base
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    IntegrityError,
    QueryError,
    TransactionError,
)


# Type variable for ORM model
T = TypeVar("T", bound=Base)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for all repositories.

    ============================================================
    USAGE
    ============================================================
    class MyRepository(BaseRepository[MyModel]):
        def __init__(self, session: Session):
            super().__init__(session, MyModel, "MyRepository")

    ============================================================
    """

    def __init__(
        self,
        session: Session,
        model_class: Type[T],
        repository_name: str
    ) -> None:
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy session (injected)
            model_class: The ORM model class this repository manages
            repository_name: Name for logging and error messages
        """
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")

    @property
    def session(self) -> Session:
        """Get the current session."""
        return self._session

    @property
    def repository_name(self) -> str:
        """Get the repository name."""
        return self._repository_name

    # =========================================================
    # PROTECTED HELPER METHODS
    # =========================================================

    def _handle_db_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[dict] = None
    ) -> None:
        """
        Wrap a database error in a repository exception.

        Raises:
            RepositoryException: Always
        """
        context = context or {}
        self._logger.error(
            f"Database error in {operation}: {error}",
            extra={"context": context},
        )

        if isinstance(error, OperationalError):
            raise ConnectionError(
                repository_name=self._repository_name,
                operation=operation,
                original_error=str(error)
            ) from error

        if isinstance(error, SQLAlchemyIntegrityError):
            error_str = str(error).lower()
            if "duplicate" in error_str or "unique" in error_str:
                raise DuplicateRecordError(
                    repository_name=self._repository_name,
                    operation=operation,
                    original_error=str(error)
                ) from error

            raise IntegrityError(
                repository_name=self._repository_name,
                operation=operation,
                message=str(error)
            ) from error

        raise QueryError(
            repository_name=self._repository_name,
            operation=operation,
            original_error=str(error)
        ) from error

    def _add(self, entity: T) -> T:
        """
        Add an entity to the session and flush it.
        """
        try:
            self._session.add(entity)
            self._session.flush()
            self._logger.debug(f"Added entity: {entity}")
            return entity
        except SQLAlchemyError as e:
            self._handle_db_error(e, "add", {"entity": str(entity)})
            raise  # Never reached, but satisfies type checker

    def _execute_query(self, stmt: Any) -> List[T]:
        """
        Execute a select statement and return entities.
        """
        try:
            result = self._session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, "query")
            raise

    def _execute_scalar(self, stmt: Any) -> Any:
        """
        Execute a select statement and return a single value or None.
        """
        try:
            return self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            self._handle_db_error(e, "query_scalar")
            raise

    def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            TransactionError: If commit fails
        """
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise TransactionError(
                repository_name=self._repository_name,
                operation="commit",
                phase="commit",
                original_error=str(e)
            ) from e

    def rollback(self) -> None:
        """
        Roll back the current transaction.
        """
        try:
            self._session.rollback()
        except SQLAlchemyError as e:
            self._logger.error(f"Rollback failed: {e}")
            raise TransactionError(
                repository_name=self._repository_name,
                operation="rollback",
                phase="rollback",
                original_error=str(e)
            ) from e
