"""
Schema-aware CRUD access to relational tables.

DataAccess ties the pieces together for each call:
column discovery -> identifier whitelisting -> statement building ->
execution. It keeps no state between calls besides the connection and the
dialect picked at construction.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import DataAccessSettings, connect, get_settings
from .db.dialects import Dialect, detect_dialect, get_dialect
from .db.executor import Executor, StatementResult
from .db.query_builder import StatementBuilder, normalize_rows
from .db.schema import SchemaColumnResolver
from .db.statement import Params
from .exceptions import EmptyRequest
from .utils.identifiers import filter_identifiers, quote_identifiers


class DataAccess:
    """
    Generic table access with identifier whitelisting.

    Column names, filter keys and the order-by column are checked against
    the table's live columns before they reach SQL text; values are always
    bound as parameters. Unknown identifiers are dropped, never rejected.

    Usage:
        conn = sqlite3.connect("shop.db")
        da = DataAccess(conn)

        da.select("books", ["id", "title"], {"price": 2.0}, order_by="title DESC")
        da.insert("books", [{"id": 3, "title": "new", "price": 1.0}])
        da.update("books", {"price": 0}, {"id": 3})
        da.delete("books", {"id": 3})
    """

    def __init__(
        self,
        connection,
        dialect: Union[Dialect, str, None] = None,
        logger=None,
    ):
        """
        Initialize data access.

        Args:
            connection: DB-API 2.0 connection
            dialect: Dialect instance or name; detected from the connection
                when omitted
            logger: Optional logger instance
        """
        if dialect is None:
            dialect = detect_dialect(connection)
        elif isinstance(dialect, str):
            dialect = get_dialect(dialect)

        self.connection = connection
        self.dialect = dialect
        self.logger = logger or logging.getLogger(__name__)

        self.executor = Executor(connection, logger=logger)
        self.resolver = SchemaColumnResolver(self.executor, dialect, logger=logger)
        self.builder = StatementBuilder(dialect, logger=logger)

    @classmethod
    def from_settings(cls, settings: Optional[DataAccessSettings] = None, logger=None):
        """Connect using settings (default: FF_DATA_ACCESS_* environment)."""
        settings = settings or get_settings()
        logging.getLogger("ff_data_access").setLevel(settings.log_level)
        return cls(connect(settings), dialect=settings.dialect, logger=logger)

    # ==================== CRUD Operations ====================

    def select(
        self,
        table: str,
        cols: Union[str, Sequence[str], None] = None,
        filter: Optional[Mapping] = None,
        order_by: Optional[str] = "",
    ) -> List[Dict[str, Any]]:
        """
        Run a SELECT on a table.

        Args:
            table: Table name (can be schema.table)
            cols: Column name or list of column names; none known = all columns
            filter: Dict of column -> value, ANDed equality conditions
            order_by: Single column with optional ASC/DESC/DEFAULT, e.g.
                ``"price DESC"``

        Returns:
            List of rows, each a dict keyed by column name

        Raises:
            StatementError: If the query fails (e.g. unknown table)
        """
        whitelist = self.get_table_columns(table)
        statement = self.builder.select(table, whitelist, cols, filter, order_by)
        return self.executor.run(statement.sql, statement.params)

    def insert(self, table: str, data: Any, allow_empty: bool = False) -> int:
        """
        Insert one row (a dict) or many rows (a list of dicts).

        The column set is taken from the first row; other rows are projected
        onto it with missing values stored as NULL.

        Args:
            table: Table name
            data: Dict of column -> value, or list of such dicts
            allow_empty: Return 0 instead of raising when nothing is left to
                insert. Empty data returns before touching the database; data
                with only unknown columns still runs column discovery, only
                the INSERT itself is skipped

        Returns:
            Number of inserted rows

        Raises:
            EmptyRequest: If no data or no known column, unless allow_empty
            StatementError: If the insert fails
        """
        if not normalize_rows(data):
            return self._empty(table, "insert", allow_empty)

        whitelist = self.get_table_columns(table)
        try:
            statement = self.builder.insert(table, whitelist, data)
        except EmptyRequest:
            return self._empty(table, "insert", allow_empty)
        return self.executor.run(statement.sql, statement.params)

    def update(
        self,
        table: str,
        data: Optional[Mapping],
        filter: Optional[Mapping] = None,
        allow_empty: bool = False,
    ) -> int:
        """
        Update rows matching the filter.

        An empty filter updates every row of the table.

        Args:
            table: Table name
            data: Dict of columns to set
            filter: Dict of WHERE conditions
            allow_empty: Return 0 instead of raising when no column is left
                to set. Column discovery still runs for a non-empty dict;
                only the UPDATE itself is skipped

        Returns:
            Number of affected rows

        Raises:
            EmptyRequest: If no known column in data, unless allow_empty
            StatementError: If the update fails
        """
        if not isinstance(data, Mapping) or not data:
            return self._empty(table, "update", allow_empty)

        whitelist = self.get_table_columns(table)
        try:
            statement = self.builder.update(table, whitelist, data, filter)
        except EmptyRequest:
            return self._empty(table, "update", allow_empty)
        return self.executor.run(statement.sql, statement.params)

    def delete(self, table: str, filter: Optional[Mapping] = None) -> int:
        """
        Delete rows matching the filter.

        An empty filter deletes every row of the table.

        Returns:
            Number of deleted rows
        """
        whitelist = self.get_table_columns(table)
        statement = self.builder.delete(table, whitelist, filter)
        return self.executor.run(statement.sql, statement.params)

    # ==================== Raw Execution ====================

    def run(self, sql: str, params: Optional[Params] = None, should_throw: bool = True) -> Any:
        """
        Execute a raw statement.

        Args:
            sql: SQL statement
            params: Bind set
            should_throw: When False, failures return the failed
                StatementResult instead of raising

        Returns:
            Rows for select/describe/pragma, row count for
            delete/insert/update/replace, the cursor otherwise
        """
        if not should_throw:
            return self.executor.try_run(sql, params)
        return self.executor.run(sql, params)

    def try_run(self, sql: str, params: Optional[Params] = None) -> StatementResult:
        """Execute a raw statement in silent mode."""
        return self.executor.try_run(sql, params)

    def last_insert_id(self, sequence: Optional[str] = None) -> Optional[str]:
        """
        Return the id generated by the last insert on this connection.

        Args:
            sequence: PostgreSQL sequence name (default: lastval())

        Raises:
            ConfigurationError: If the dialect cannot report insert ids
        """
        statement = self.dialect.last_insert_id_statement(sequence)
        rows = self.executor.run(statement.sql, statement.params)
        if not rows:
            return None

        value = next(iter(rows[0].values()))
        return None if value is None else str(value)

    # ==================== Schema & Identifiers ====================

    def get_table_columns(self, table: str) -> List[str]:
        """Column names of a table; empty for an unknown table."""
        return self.resolver.get_table_columns(table)

    def filter_for_table(self, table: str, columns: Any) -> List[str]:
        """Keep the names in ``columns`` that are columns of ``table``."""
        return filter_identifiers(self.get_table_columns(table), columns)

    def create_order_by_statement(self, table: str, order_by: Optional[str]) -> str:
        """
        Build a whitelisted ORDER BY clause, e.g. ``ORDER BY `price` ASC``.

        Returns an empty string when the column is not part of the table.
        """
        return self.builder.order_by_clause(self.get_table_columns(table), order_by)

    def quote_identifiers(self, names: Union[str, Sequence[str]]) -> Union[str, List[str]]:
        """Quote one or more identifiers for this connection's dialect."""
        return quote_identifiers(names, self.dialect.quote_char)

    def _empty(self, table: str, operation: str, allow_empty: bool) -> int:
        if allow_empty:
            self.logger.debug(f"Skipping {operation} on {table}: no known columns")
            return 0
        raise EmptyRequest(table, operation)
