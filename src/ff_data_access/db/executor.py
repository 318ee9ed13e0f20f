"""
Statement execution against a DB-API 2.0 connection.

The executor runs already-built SQL with its bind set and shapes the result
by statement kind. Failures come back as a StatementResult failure variant;
``run`` turns that into a raised StatementError, ``try_run`` hands it to the
caller untouched.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import StatementError
from .statement import Params

_ROWS_PATTERN = re.compile(r"^\s*(select|describe|pragma)\b", re.IGNORECASE)
_ROW_COUNT_PATTERN = re.compile(r"^\s*(delete|insert|update|replace)\b", re.IGNORECASE)


class StatementKind(str, Enum):
    """Return shape of an executed statement."""

    ROWS = "rows"
    ROW_COUNT = "row_count"
    HANDLE = "handle"


def classify_statement(sql: str) -> StatementKind:
    """
    Classify a statement by its leading keyword.

    select/describe/pragma return rows, delete/insert/update/replace return
    the affected row count, everything else (DDL etc.) returns the cursor.
    """
    if _ROWS_PATTERN.match(sql):
        return StatementKind.ROWS
    if _ROW_COUNT_PATTERN.match(sql):
        return StatementKind.ROW_COUNT
    return StatementKind.HANDLE


@dataclass(frozen=True)
class StatementResult:
    """
    Outcome of executing one statement.

    Exactly one of ``value`` / ``error`` is meaningful: a failed result is
    falsy and carries the StatementError that ``unwrap`` would raise.
    """

    value: Any = None
    error: Optional[StatementError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Any:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: Any) -> Any:
        """Return the value, or ``default`` for a failed result."""
        return self.value if self.error is None else default


class Executor:
    """
    Runs SQL on a DB-API connection.

    The executor holds no state besides the connection and logger; cursors
    are opened per statement and closed once their result is consumed,
    except for HANDLE statements whose cursor is returned to the caller.
    """

    def __init__(self, connection, logger=None):
        """
        Initialize executor.

        Args:
            connection: DB-API 2.0 connection
            logger: Optional logger instance
        """
        self.connection = connection
        self.logger = logger or logging.getLogger(__name__)

    def execute(self, sql: str, params: Optional[Params] = None) -> StatementResult:
        """
        Execute a statement without raising on driver errors.

        Args:
            sql: SQL statement
            params: Bind set (dict for named, list for positional placeholders)

        Returns:
            StatementResult holding rows, a row count or the cursor; or the
            StatementError describing the failed phase
        """
        sql = sql.strip()
        kind = classify_statement(sql)
        self.logger.debug(f"Executing {kind.value} statement: {sql} ({len(params or ())} params)")

        try:
            cursor = self.connection.cursor()
        except Exception as e:
            return self._failure(StatementError.PREPARE_FAILED, e, sql)

        try:
            if params is not None:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)

            if kind is StatementKind.HANDLE:
                return StatementResult(value=cursor)

            if kind is StatementKind.ROWS:
                value = self._fetch_rows(cursor)
            else:
                value = cursor.rowcount
        except Exception as e:
            cursor.close()
            return self._failure(StatementError.EXECUTE_FAILED, e, sql)

        cursor.close()
        return StatementResult(value=value)

    def run(self, sql: str, params: Optional[Params] = None) -> Any:
        """
        Execute a statement, raising StatementError on failure.

        Returns:
            list of row dicts, affected row count, or the executed cursor
        """
        result = self.execute(sql, params)
        if not result.ok:
            self.logger.error(
                f"Statement failed: {result.error}",
                extra={"sql": result.error.sql, "code": result.error.code},
                exc_info=result.error,
            )
        return result.unwrap()

    def try_run(self, sql: str, params: Optional[Params] = None) -> StatementResult:
        """Execute a statement in silent mode (never raises driver errors)."""
        return self.execute(sql, params)

    def _fetch_rows(self, cursor) -> List[Dict[str, Any]]:
        """Fetch all rows as dicts keyed by column name."""
        rows = cursor.fetchall()
        if not rows:
            return []

        if isinstance(rows[0], Mapping):
            # DictCursor-style drivers already key by column
            return [dict(row) for row in rows]

        columns = [col[0] for col in cursor.description]
        return [dict(zip(columns, row)) for row in rows]

    def _failure(self, phase: str, error: Exception, sql: str) -> StatementResult:
        statement_error = StatementError.from_driver_error(phase, error, sql=sql)
        statement_error.__cause__ = error
        self.logger.debug(f"{phase}: {error}")
        return StatementResult(error=statement_error)
