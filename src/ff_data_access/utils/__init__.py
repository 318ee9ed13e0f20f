"""
ff-data-access utility modules.

Identifier quoting and whitelisting shared by the dialects and the
statement builder.
"""

from .identifiers import (
    BACKTICK,
    DOUBLE_QUOTE,
    filter_identifiers,
    filter_keys,
    quote_identifier,
    quote_identifiers,
    unquote_identifier,
)

__all__ = [
    "BACKTICK",
    "DOUBLE_QUOTE",
    "filter_identifiers",
    "filter_keys",
    "quote_identifier",
    "quote_identifiers",
    "unquote_identifier",
]
