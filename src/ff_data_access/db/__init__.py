"""
Database dialect, discovery, building and execution modules.
"""

from .dialects import (
    AnsiDialect,
    Dialect,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    detect_dialect,
    get_dialect,
)
from .executor import Executor, StatementKind, StatementResult, classify_statement
from .query_builder import StatementBuilder, parse_order_by
from .schema import SchemaColumnResolver
from .statement import BuiltStatement

__all__ = [
    "BuiltStatement",
    # Dialects
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "PostgresDialect",
    "AnsiDialect",
    "detect_dialect",
    "get_dialect",
    # Discovery
    "SchemaColumnResolver",
    # Building
    "StatementBuilder",
    "parse_order_by",
    # Execution
    "Executor",
    "StatementKind",
    "StatementResult",
    "classify_statement",
]
