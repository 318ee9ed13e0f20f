"""
Query builder module for whitelisted SQL generation.

Provides the dialect-aware StatementBuilder and order-by parsing.
"""

from .base import SET_PREFIX, WHERE_PREFIX, StatementBuilder, normalize_rows, parse_order_by

__all__ = [
    "StatementBuilder",
    "parse_order_by",
    "normalize_rows",
    "WHERE_PREFIX",
    "SET_PREFIX",
]
