"""
Custom exceptions for the ff-data-access package.
"""

from typing import Any, Optional


class DataAccessError(Exception):
    """Base exception for all data-access errors."""

    pass


class EmptyRequest(DataAccessError):
    """Raised when an insert or update has no column left to write."""

    def __init__(self, table: str = None, operation: str = None):
        self.table = table
        self.operation = operation

        message = "empty request"
        if operation and table:
            message = f"empty request: {operation} on {table} has no known columns"

        super().__init__(message)


class StatementError(DataAccessError):
    """Raised when the driver fails to prepare or execute a statement."""

    PREPARE_FAILED = "prepare failed"
    EXECUTE_FAILED = "execute failed"

    def __init__(
        self,
        phase: str,
        message: str,
        code: Optional[Any] = None,
        sql: Optional[str] = None,
    ):
        self.phase = phase
        self.code = code
        self.sql = sql

        if code is not None:
            message = f"{phase} [{code}]: {message}"
        else:
            message = f"{phase}: {message}"

        super().__init__(message)

    @classmethod
    def from_driver_error(cls, phase: str, error: Exception, sql: str = None) -> "StatementError":
        """Wrap a DB-API exception, keeping the driver's error code."""
        return cls(phase, str(error), code=driver_error_code(error), sql=sql)


class ConfigurationError(DataAccessError):
    """Raised for invalid settings or an unknown dialect."""

    pass


def driver_error_code(error: Exception) -> Optional[Any]:
    """
    Extract the driver-specific error code from a DB-API exception.

    psycopg2 exposes the SQLSTATE as ``pgcode``, sqlite3 (3.11+) exposes
    ``sqlite_errorname``, PyMySQL puts the numeric code first in ``args``.
    """
    for attr in ("pgcode", "sqlite_errorname", "sqlstate"):
        code = getattr(error, attr, None)
        if code:
            return code

    if error.args and isinstance(error.args[0], int):
        return error.args[0]
    return None
