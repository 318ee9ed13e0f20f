"""
ff-data-access: Schema-aware CRUD helpers for relational databases.

Features:
- SELECT / INSERT / UPDATE / DELETE built from plain dicts
- Column whitelisting against the live schema on every call
- Dialect-aware identifier quoting (SQLite, MySQL, PostgreSQL, ANSI)
- All values bound as parameters
- Throwing and silent execution modes
"""

# Version is read from package metadata (pyproject.toml is the single source of truth)
try:
    from importlib.metadata import version

    __version__ = version("ff-data-access")
except Exception:
    __version__ = "1.0.0"

from .config import DataAccessSettings, connect, get_settings
from .data_access import DataAccess

# Database exports
from .db import (
    AnsiDialect,
    BuiltStatement,
    Dialect,
    Executor,
    MySQLDialect,
    PostgresDialect,
    SchemaColumnResolver,
    SQLiteDialect,
    StatementBuilder,
    StatementKind,
    StatementResult,
    classify_statement,
    detect_dialect,
    get_dialect,
)

# Exceptions
from .exceptions import (
    ConfigurationError,
    DataAccessError,
    EmptyRequest,
    StatementError,
)

# Utilities
from .utils import (
    filter_identifiers,
    filter_keys,
    quote_identifier,
    quote_identifiers,
    unquote_identifier,
)

__all__ = [
    # Version
    "__version__",
    # Facade
    "DataAccess",
    # Configuration
    "DataAccessSettings",
    "connect",
    "get_settings",
    # Dialects
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "PostgresDialect",
    "AnsiDialect",
    "detect_dialect",
    "get_dialect",
    # Components
    "BuiltStatement",
    "SchemaColumnResolver",
    "StatementBuilder",
    "Executor",
    "StatementKind",
    "StatementResult",
    "classify_statement",
    # Exceptions
    "DataAccessError",
    "EmptyRequest",
    "StatementError",
    "ConfigurationError",
    # Utilities
    "quote_identifier",
    "quote_identifiers",
    "unquote_identifier",
    "filter_identifiers",
    "filter_keys",
]
