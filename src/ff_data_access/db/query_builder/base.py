"""
Whitelisting statement builder.

Builds SELECT / INSERT / UPDATE / DELETE statements from caller input that
has been intersected with a table's column whitelist:
- Identifiers are filtered first, then quoted with the dialect quote char
- Values only ever appear in the bind set
- Filter placeholders are named w_<n>, SET placeholders u_<n>, INSERT values v_<n>
- qmark/format dialects get the same bind set as a list in placeholder order
"""

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional, Tuple, Union

from ...exceptions import EmptyRequest
from ...utils.identifiers import filter_identifiers, filter_keys
from ..dialects import Dialect
from ..statement import BuiltStatement

WHERE_PREFIX = "w_"
SET_PREFIX = "u_"
VALUES_PREFIX = "v_"

_ORDER_BY_PATTERN = re.compile(
    r"^\s*(?P<column>.+?)(?:\s+(?P<direction>asc|desc|default))?\s*$",
    re.IGNORECASE | re.DOTALL,
)

Columns = Union[str, Sequence[str], None]


def parse_order_by(order_by: Optional[str]) -> Optional[Tuple[str, Optional[str]]]:
    """
    Split an order-by expression into column and direction.

    Args:
        order_by: e.g. ``"price DESC"`` or ``"price"``

    Returns:
        ``(column, direction)`` with direction upper-cased or None when no
        direction token is present; None for an empty expression

    Examples:
        >>> parse_order_by("price desc")
        ('price', 'DESC')
        >>> parse_order_by("price")
        ('price', None)
    """
    if not order_by or not order_by.strip():
        return None

    match = _ORDER_BY_PATTERN.match(order_by)
    direction = match.group("direction")
    return match.group("column"), direction.upper() if direction else None


def normalize_rows(data: Any) -> List[Mapping]:
    """
    Turn insert payloads into a list of row mappings.

    A mapping is one row, a sequence of mappings is a bulk insert. Anything
    else (None, a string, an empty container) gives an empty list.
    """
    if isinstance(data, Mapping):
        return [data] if data else []
    if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
        return []

    rows = list(data)
    for row in rows:
        if not isinstance(row, Mapping):
            raise TypeError(f"Bulk insert rows must be mappings, got {type(row).__name__}")
    return rows


class StatementBuilder:
    """
    Dialect-aware builder for whitelisted CRUD statements.

    The builder never talks to the database. Every method receives the
    table's column whitelist and returns a BuiltStatement.

    Example:
        >>> builder = StatementBuilder(SQLiteDialect())
        >>> builder.select("books", ["id", "title"], filter={"id": 1})
        BuiltStatement(sql='SELECT * FROM `books` WHERE `id` = :w_0', params={'w_0': 1})
    """

    def __init__(self, dialect: Dialect, logger=None):
        """
        Initialize the StatementBuilder.

        Args:
            dialect: SQL dialect used for quoting and placeholders
            logger: Optional logger instance
        """
        self.dialect = dialect
        self.logger = logger or logging.getLogger(__name__)

    def select(
        self,
        table: str,
        whitelist: Sequence[str],
        cols: Columns = None,
        filter: Optional[Mapping] = None,
        order_by: Optional[str] = "",
    ) -> BuiltStatement:
        """
        Build SELECT query.

        Args:
            table: Table name (can be schema.table)
            whitelist: Columns the table has
            cols: Column or list of columns to select (unknown ones dropped,
                nothing left = ``*``)
            filter: Dict of column -> value equality conditions
            order_by: ``"<column> [ASC|DESC|DEFAULT]"``

        Returns:
            BuiltStatement; params shaped by the dialect (dict or list)
        """
        if isinstance(cols, str):
            cols = [cols]
        columns = filter_identifiers(whitelist, cols)
        select_clause = ", ".join(self.dialect.quote(col) for col in columns) if columns else "*"

        query_parts = [f"SELECT {select_clause}", f"FROM {self.dialect.quote(table)}"]

        where_clause, params = self.where_clause(whitelist, filter)
        if where_clause:
            query_parts.append(f"WHERE {where_clause}")

        order_clause = self.order_by_clause(whitelist, order_by)
        if order_clause:
            query_parts.append(order_clause)

        return BuiltStatement(" ".join(query_parts), self.dialect.bind_set(params))

    def insert(self, table: str, whitelist: Sequence[str], data: Any) -> BuiltStatement:
        """
        Build INSERT query for one row or many.

        The column set comes from the first row's keys; every row is
        projected onto it and missing values are bound as NULL.

        Args:
            table: Table name
            whitelist: Columns the table has
            data: Dict of column -> value, or a list of such dicts

        Returns:
            BuiltStatement with one parameter per value, in row-major order

        Raises:
            EmptyRequest: If there is no data or no known column
        """
        rows = normalize_rows(data)
        if not rows:
            raise EmptyRequest(table, "insert")

        columns = filter_keys(whitelist, rows[0])
        if not columns:
            raise EmptyRequest(table, "insert")

        params = {}
        groups = []
        for row in rows:
            markers = []
            for col in columns:
                param_name = f"{VALUES_PREFIX}{len(params)}"
                markers.append(self.dialect.named_placeholder(param_name))
                params[param_name] = row.get(col)
            groups.append(f"({', '.join(markers)})")

        quoted_columns = ", ".join(self.dialect.quote(col) for col in columns)
        query = (
            f"INSERT INTO {self.dialect.quote(table)} ({quoted_columns}) "
            f"VALUES {', '.join(groups)}"
        )
        return BuiltStatement(query, self.dialect.bind_set(params))

    def update(
        self,
        table: str,
        whitelist: Sequence[str],
        data: Any,
        filter: Optional[Mapping] = None,
    ) -> BuiltStatement:
        """
        Build UPDATE query.

        An empty filter (or one with only unknown columns) has no WHERE
        clause and updates every row.

        Args:
            table: Table name
            whitelist: Columns the table has
            data: Dict of columns to update
            filter: Dict of WHERE conditions

        Returns:
            BuiltStatement; params shaped by the dialect (dict or list)

        Raises:
            EmptyRequest: If no column of ``data`` is known
        """
        columns = filter_keys(whitelist, data)
        if not columns:
            raise EmptyRequest(table, "update")

        set_clause, params = self._bind_clause(columns, data, ", ", SET_PREFIX)
        query_parts = [f"UPDATE {self.dialect.quote(table)}", f"SET {set_clause}"]

        where_clause, where_params = self.where_clause(whitelist, filter)
        if where_clause:
            query_parts.append(f"WHERE {where_clause}")
            params.update(where_params)

        return BuiltStatement(" ".join(query_parts), self.dialect.bind_set(params))

    def delete(
        self, table: str, whitelist: Sequence[str], filter: Optional[Mapping] = None
    ) -> BuiltStatement:
        """
        Build DELETE query.

        An empty filter deletes every row.

        Args:
            table: Table name
            whitelist: Columns the table has
            filter: Dict of WHERE conditions

        Returns:
            BuiltStatement; params shaped by the dialect (dict or list)
        """
        query_parts = [f"DELETE FROM {self.dialect.quote(table)}"]

        where_clause, params = self.where_clause(whitelist, filter)
        if where_clause:
            query_parts.append(f"WHERE {where_clause}")

        return BuiltStatement(" ".join(query_parts), self.dialect.bind_set(params))

    def where_clause(
        self, whitelist: Sequence[str], filter: Optional[Mapping]
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Build WHERE conditions from a filter dict.

        Returns:
            Tuple of (conditions joined by AND, param_dict keyed w_<n>); the condition
            string is empty when no filter key is known
        """
        columns = filter_keys(whitelist, filter)
        if not columns:
            return "", {}
        return self._bind_clause(columns, filter, " AND ", WHERE_PREFIX)

    def order_by_clause(self, whitelist: Sequence[str], order_by: Optional[str]) -> str:
        """
        Build ORDER BY clause for a single column.

        A column missing from the whitelist produces no clause at all.
        """
        parsed = parse_order_by(order_by)
        if parsed is None:
            return ""

        column, direction = parsed
        if not filter_identifiers(whitelist, [column]):
            self.logger.warning(f"Ignoring ORDER BY on unknown column {column!r}")
            return ""

        clause = f"ORDER BY {self.dialect.quote(column)}"
        if direction:
            clause = f"{clause} {direction}"
        return clause

    def _bind_clause(
        self, columns: List[str], values: Mapping, glue: str, prefix: str
    ) -> Tuple[str, Dict[str, Any]]:
        parts = []
        params = {}
        for i, col in enumerate(columns):
            param_name = f"{prefix}{i}"
            placeholder = self.dialect.named_placeholder(param_name)
            parts.append(f"{self.dialect.quote(col)} = {placeholder}")
            params[param_name] = values[col]
        return glue.join(parts), params
