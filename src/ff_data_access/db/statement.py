"""
Built SQL statement container.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

Params = Union[Dict[str, Any], List[Any]]


@dataclass(frozen=True)
class BuiltStatement:
    """
    SQL text plus the bind set that goes with it.

    ``params`` is a dict for statements using named placeholders and a list
    for positional ones (bulk INSERT, schema discovery).
    """

    sql: str
    params: Params = field(default_factory=dict)

    def __iter__(self):
        # Allows ``sql, params = builder.select(...)``
        return iter((self.sql, self.params))
