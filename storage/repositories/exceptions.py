"""
Repository Layer Exceptions.

============================================================
PURPOSE
============================================================
Repositories catch SQLAlchemy errors and re-raise them as one
of these, carrying the repository name and operation.

The ingestion layer decides whether a repository failure is
per-row (logged, skipped) or cycle-level (StorageError).

============================================================
"""

from typing import Optional


class RepositoryException(Exception):
    """
    Base exception for all repository operations.
    """

    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None
    ) -> None:
        self.message = message
        self.repository_name = repository_name
        self.operation = operation
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return f"[{self.repository_name}] {self.operation}: {self.message}"


class DuplicateRecordError(RepositoryException):
    """
    Raised on a unique-constraint violation during insert.
    """

    def __init__(
        self,
        repository_name: str,
        operation: str,
        original_error: str
    ) -> None:
        super().__init__(
            message=f"Duplicate record: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class IntegrityError(RepositoryException):
    """
    Raised when other integrity constraints are violated
    (NOT NULL, numeric overflow on strict backends, ...).
    """

    def __init__(
        self,
        repository_name: str,
        operation: str,
        message: str
    ) -> None:
        super().__init__(
            message=f"Integrity constraint violated: {message}",
            repository_name=repository_name,
            operation=operation,
        )


class ConnectionError(RepositoryException):
    """
    Raised when the database cannot be reached.
    """

    def __init__(
        self,
        repository_name: str,
        operation: str,
        original_error: str
    ) -> None:
        super().__init__(
            message=f"Database connection failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class QueryError(RepositoryException):
    """
    Raised when a statement fails for any other reason.
    """

    def __init__(
        self,
        repository_name: str,
        operation: str,
        original_error: str
    ) -> None:
        super().__init__(
            message=f"Query failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class TransactionError(RepositoryException):
    """
    Raised when commit or rollback fails.
    """

    def __init__(
        self,
        repository_name: str,
        operation: str,
        phase: str,
        original_error: str
    ) -> None:
        super().__init__(
            message=f"Transaction {phase} failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"phase": phase, "original_error": original_error}
        )
        self.phase = phase

