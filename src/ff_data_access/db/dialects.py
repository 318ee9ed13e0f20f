"""
SQL dialect abstraction for multi-backend support.

This module provides dialect objects that abstract the differences between
SQLite, MySQL, PostgreSQL and generic ANSI databases, allowing ff-data-access
to build statements for any DB-API 2.0 connection:
- Identifier quote character (backtick vs double quote)
- Placeholder style (:name, ?, %(name)s or %s) and bind set shape
- Column discovery statement and result field
- Last insert id lookup
"""

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError
from ..utils.identifiers import BACKTICK, DOUBLE_QUOTE, quote_identifier
from .statement import BuiltStatement, Params

COLON_STYLES = ("qmark", "named")
PERCENT_STYLES = ("pyformat", "format")
NAMED_STYLES = ("named", "pyformat")


class Dialect(ABC):
    """
    Abstract base class for SQL dialects.

    A dialect is selected once per DataAccess instance and is immutable
    afterwards. Subclasses provide the quote character, the default DB-API
    paramstyle and the column discovery statement.
    """

    name: str = ""
    quote_char: str = DOUBLE_QUOTE
    default_paramstyle: str = "qmark"
    column_name_field: str = "column_name"

    def __init__(self, paramstyle: Optional[str] = None):
        """
        Initialize dialect.

        Args:
            paramstyle: DB-API paramstyle of the driver; defaults to the
                dialect's usual driver
        """
        paramstyle = paramstyle or self.default_paramstyle
        if paramstyle not in COLON_STYLES + PERCENT_STYLES:
            raise ConfigurationError(
                f"Unsupported paramstyle: {paramstyle}. "
                f"Supported: {', '.join(COLON_STYLES + PERCENT_STYLES)}"
            )
        self.paramstyle = paramstyle

    def __repr__(self) -> str:
        return f"{type(self).__name__}(paramstyle={self.paramstyle!r})"

    def quote(self, identifier: str) -> str:
        """
        Quote an identifier with this dialect's quote character.

        Under format/pyformat a literal ``%`` is doubled, since the driver
        %-interpolates the statement text when binding.
        """
        quoted = quote_identifier(identifier, self.quote_char)
        if self.paramstyle in PERCENT_STYLES:
            quoted = quoted.replace("%", "%%")
        return quoted

    @property
    def binds_by_name(self) -> bool:
        """True when the driver takes a dict of named parameters."""
        return self.paramstyle in NAMED_STYLES

    def named_placeholder(self, name: str) -> str:
        """
        Render the bind marker for the parameter ``name``.

        named and pyformat drivers get ``:w_0`` / ``%(w_0)s``; qmark and
        format drivers only understand positions, so ``?`` / ``%s``.
        """
        if self.paramstyle == "named":
            return f":{name}"
        if self.paramstyle == "pyformat":
            return f"%({name})s"
        return self.positional_placeholder()

    def positional_placeholder(self) -> str:
        """Render a positional bind marker, ``?`` or ``%s``."""
        if self.paramstyle in PERCENT_STYLES:
            return "%s"
        return "?"

    def bind_set(self, params: Dict[str, Any]) -> Params:
        """
        Shape named parameters for the driver.

        ``params`` must be in placeholder order; positional styles get the
        values as a list in that order.
        """
        if self.binds_by_name:
            return dict(params)
        return list(params.values())

    @abstractmethod
    def discovery_statement(self, table: str) -> BuiltStatement:
        """
        Return the statement that lists the columns of ``table``.

        Each result row carries the column name under ``column_name_field``.
        """
        pass

    def last_insert_id_statement(self, sequence: Optional[str] = None) -> BuiltStatement:
        """Return the statement that reads the last generated id."""
        raise ConfigurationError(f"Dialect '{self.name}' has no last insert id support")


class SQLiteDialect(Dialect):
    """
    Dialect for the sqlite3 module.

    sqlite3 declares qmark but binds ``:name`` markers from a dict as well;
    named is used so WHERE/SET parameters keep their w_/u_ names.
    """

    name = "sqlite"
    quote_char = BACKTICK
    default_paramstyle = "named"
    column_name_field = "name"

    def discovery_statement(self, table: str) -> BuiltStatement:
        """SQLite lists columns with PRAGMA table_info."""
        return BuiltStatement(f"PRAGMA table_info({self.quote(table)});", [])

    def last_insert_id_statement(self, sequence: Optional[str] = None) -> BuiltStatement:
        return BuiltStatement("SELECT last_insert_rowid()", [])


class MySQLDialect(Dialect):
    """Dialect for MySQL drivers (PyMySQL, mysqlclient, mysql-connector)."""

    name = "mysql"
    quote_char = BACKTICK
    default_paramstyle = "pyformat"
    column_name_field = "Field"

    def discovery_statement(self, table: str) -> BuiltStatement:
        """MySQL lists columns with DESCRIBE."""
        return BuiltStatement(f"DESCRIBE {self.quote(table)};", [])

    def last_insert_id_statement(self, sequence: Optional[str] = None) -> BuiltStatement:
        return BuiltStatement("SELECT LAST_INSERT_ID()", [])


class PostgresDialect(Dialect):
    """Dialect for PostgreSQL drivers (psycopg2, psycopg)."""

    name = "postgres"
    quote_char = DOUBLE_QUOTE
    default_paramstyle = "pyformat"

    def discovery_statement(self, table: str) -> BuiltStatement:
        """
        Query information_schema, scoped to a schema for ``schema.table``.

        Schema and table travel as bound values, never as SQL text.
        """
        if "." in table:
            schema, table_name = table.split(".", 1)
            return BuiltStatement(
                "SELECT column_name FROM information_schema.columns "
                f"WHERE table_schema = {self.named_placeholder('table_schema')} "
                f"AND table_name = {self.named_placeholder('table_name')};",
                self.bind_set({"table_schema": schema, "table_name": table_name}),
            )
        return _information_schema_statement(self, table)

    def last_insert_id_statement(self, sequence: Optional[str] = None) -> BuiltStatement:
        if sequence:
            return BuiltStatement(
                f"SELECT currval({self.named_placeholder('sequence')})",
                self.bind_set({"sequence": sequence}),
            )
        return BuiltStatement("SELECT lastval()", [])


class AnsiDialect(Dialect):
    """Fallback for any other driver exposing information_schema."""

    name = "other"
    quote_char = DOUBLE_QUOTE
    default_paramstyle = "qmark"

    def discovery_statement(self, table: str) -> BuiltStatement:
        return _information_schema_statement(self, table)


def _information_schema_statement(dialect: Dialect, table: str) -> BuiltStatement:
    return BuiltStatement(
        "SELECT column_name FROM information_schema.columns "
        f"WHERE table_name = {dialect.named_placeholder('table_name')};",
        dialect.bind_set({"table_name": table}),
    )


_DIALECTS = {
    "sqlite": SQLiteDialect,
    "mysql": MySQLDialect,
    "postgres": PostgresDialect,
    "other": AnsiDialect,
}

_ALIASES = {
    "sqlite3": "sqlite",
    "pgsql": "postgres",
    "postgresql": "postgres",
    "ansi": "other",
}

# Root module of the DB-API driver -> dialect name
_DRIVER_MODULES = {
    "sqlite3": "sqlite",
    "pymysql": "mysql",
    "MySQLdb": "mysql",
    "mysql": "mysql",
    "psycopg2": "postgres",
    "psycopg": "postgres",
}


def get_dialect(name: str, paramstyle: Optional[str] = None) -> Dialect:
    """
    Resolve a dialect by name.

    Args:
        name: sqlite, mysql, postgres or other (aliases: pgsql, postgresql, ansi)
        paramstyle: Optional DB-API paramstyle override

    Raises:
        ConfigurationError: If the name is unknown
    """
    key = _ALIASES.get(name.lower(), name.lower())
    dialect_class = _DIALECTS.get(key)
    if dialect_class is None:
        raise ConfigurationError(
            f"Unknown dialect: {name}. Supported: {', '.join(_DIALECTS)}"
        )
    return dialect_class(paramstyle)


def detect_dialect(connection) -> Dialect:
    """
    Automatically detect the dialect from a DB-API connection.

    Unknown drivers fall back to the ANSI dialect, using the driver module's
    declared paramstyle when it is one we can render.

    Args:
        connection: DB-API 2.0 connection

    Returns:
        Appropriate Dialect instance
    """
    conn_module = connection.__module__ if hasattr(connection, "__module__") else ""
    root = (conn_module or "").split(".")[0]

    name = _DRIVER_MODULES.get(root)
    if name is not None:
        return get_dialect(name)

    paramstyle = getattr(sys.modules.get(root), "paramstyle", None)
    if paramstyle not in COLON_STYLES + PERCENT_STYLES:
        paramstyle = None
    return AnsiDialect(paramstyle)
