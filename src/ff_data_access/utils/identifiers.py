"""
SQL identifier handling utilities.

Provides quoting of identifiers (table names, column names) for the
supported dialects and whitelisting of caller-supplied identifiers against
the columns a table actually has. Only identifiers that survive
``filter_identifiers`` are ever quoted into SQL text.
"""

from collections.abc import Mapping, Sequence
from typing import Any, List, Union

BACKTICK = "`"
DOUBLE_QUOTE = '"'


def quote_identifier(name: str, quote_char: str) -> str:
    """
    Quote a SQL identifier, handling ``schema.table`` references.

    The name is split on the first dot; each segment has the quote
    character doubled and is wrapped separately.

    Args:
        name: Identifier to quote
        quote_char: Dialect quote character (backtick or double quote)

    Returns:
        Quoted identifier

    Examples:
        >>> quote_identifier("a`b", "`")
        '`a``b`'
        >>> quote_identifier("sales.orders", "`")
        '`sales`.`orders`'
        >>> quote_identifier('my"col', '"')
        '"my""col"'
    """
    segments = name.split(".", 1)
    doubled = quote_char * 2
    return ".".join(
        f"{quote_char}{segment.replace(quote_char, doubled)}{quote_char}" for segment in segments
    )


def quote_identifiers(
    names: Union[str, Sequence[str]], quote_char: str
) -> Union[str, List[str]]:
    """
    Quote one identifier or a sequence of identifiers.

    A single string gives a single quoted string back, anything else gives
    a list in the same order.
    """
    if isinstance(names, str):
        return quote_identifier(names, quote_char)
    return [quote_identifier(name, quote_char) for name in names]


def unquote_identifier(quoted: str, quote_char: str) -> str:
    """
    Reverse ``quote_identifier``.

    Args:
        quoted: Text produced by ``quote_identifier``
        quote_char: The quote character it was produced with

    Returns:
        The original identifier

    Raises:
        ValueError: If ``quoted`` is not a well-formed quoted identifier
    """
    segments = []
    pos = 0
    length = len(quoted)

    while True:
        if pos >= length or quoted[pos] != quote_char:
            raise ValueError(f"Malformed quoted identifier: {quoted!r}")
        pos += 1

        chars = []
        while True:
            if pos >= length:
                raise ValueError(f"Unterminated quoted identifier: {quoted!r}")
            if quoted[pos] == quote_char:
                # A doubled quote is a literal quote character
                if pos + 1 < length and quoted[pos + 1] == quote_char:
                    chars.append(quote_char)
                    pos += 2
                    continue
                pos += 1
                break
            chars.append(quoted[pos])
            pos += 1
        segments.append("".join(chars))

        if pos == length:
            break
        if quoted[pos] != "." or len(segments) == 2:
            raise ValueError(f"Malformed quoted identifier: {quoted!r}")
        pos += 1

    return ".".join(segments)


def filter_identifiers(whitelist: Sequence[str], candidates: Any) -> List[str]:
    """
    Keep only the candidates that appear in the whitelist.

    Candidate order is preserved and duplicates are dropped. Anything that
    is not a list-like sequence of names (a bare string, a mapping, None)
    yields an empty list. Unknown names are dropped silently.

    Examples:
        >>> filter_identifiers(["id", "title", "price"], ["price", "nope", "id"])
        ['price', 'id']
        >>> filter_identifiers(["id"], "id")
        []
    """
    if isinstance(candidates, (str, bytes, Mapping)) or not isinstance(candidates, Sequence):
        return []

    allowed = set(whitelist)
    result = []
    for candidate in candidates:
        if isinstance(candidate, str) and candidate in allowed and candidate not in result:
            result.append(candidate)
    return result


def filter_keys(whitelist: Sequence[str], params: Any) -> List[str]:
    """
    Whitelist the keys of a mapping.

    Examples:
        >>> filter_keys(["id", "title"], {"title": "x", "unknown": 1})
        ['title']
    """
    if not isinstance(params, Mapping):
        return []
    return filter_identifiers(whitelist, list(params.keys()))
