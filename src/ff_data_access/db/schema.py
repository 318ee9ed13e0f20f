"""
Live column discovery for whitelisting.
"""

import logging
from typing import List

from .dialects import Dialect
from .executor import Executor


class SchemaColumnResolver:
    """
    Reads the column names of a table from the live database.

    Nothing is cached: every call queries the schema again, so statements are
    always whitelisted against the table as it exists at call time.

    Usage:
        resolver = SchemaColumnResolver(executor, SQLiteDialect())
        resolver.get_table_columns("books")  # ['id', 'title', 'price']
    """

    def __init__(self, executor: Executor, dialect: Dialect, logger=None):
        self.executor = executor
        self.dialect = dialect
        self.logger = logger or logging.getLogger(__name__)

    def get_table_columns(self, table: str) -> List[str]:
        """
        Return the table's column names in schema order.

        Discovery runs in silent mode: an unknown table or any other driver
        failure yields an empty list instead of an error.
        """
        statement = self.dialect.discovery_statement(table)
        result = self.executor.try_run(statement.sql, statement.params)
        if not result.ok:
            self.logger.debug(f"Column discovery failed for {table}: {result.error}")
            return []

        rows = result.value
        if not isinstance(rows, list):
            return []

        field = self.dialect.column_name_field
        columns = [row[field] for row in rows if field in row]
        self.logger.debug(f"Discovered {len(columns)} columns for {table}")
        return columns
