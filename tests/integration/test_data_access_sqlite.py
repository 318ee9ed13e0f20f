"""
End-to-end tests of DataAccess against SQLite.

Covers the full path: column discovery, whitelisting, quoting, building and
execution, including table and column names that contain backticks.
"""

import sqlite3

import pytest

from ff_data_access import DataAccess, EmptyRequest, SQLiteDialect, StatementError

FIRST = "1`st"
SECOND = "2``st"
ESCAPED_TABLE = "test`escp"


class TestColumnDiscovery:
    """Test reading the whitelist from the live schema."""

    def test_table_columns(self, data_access):
        assert data_access.get_table_columns("books") == ["id", "title", "price"]
        assert data_access.get_table_columns(ESCAPED_TABLE) == [FIRST, SECOND]

    def test_unknown_table_returns_empty(self, data_access):
        """Test discovering a nonexistent table is not an error."""
        assert data_access.get_table_columns("unknown") == []

    def test_schema_changes_are_seen(self, data_access, db):
        """Test the whitelist is recomputed on every call."""
        db.execute("ALTER TABLE books ADD COLUMN isbn TEXT")

        assert data_access.get_table_columns("books") == ["id", "title", "price", "isbn"]
        assert data_access.select("books", ["isbn"], {"id": 1}) == [{"isbn": None}]

    def test_filter_for_table(self, data_access):
        assert data_access.filter_for_table("books", ["price", "nope", "id"]) == ["price", "id"]
        assert data_access.filter_for_table("books", "noArray") == []


class TestSelect:
    """Test SELECT end to end."""

    def test_select_without_parameter(self, data_access):
        assert data_access.select("books") == [
            {"id": 1, "title": "last", "price": 2.0},
            {"id": 2, "title": "first", "price": 1.5},
        ]

    def test_select_with_one_parameter(self, data_access):
        assert data_access.select("books", [], {"id": 1}) == [
            {"id": 1, "title": "last", "price": 2.0}
        ]

    def test_select_two_parameters(self, data_access):
        assert data_access.select("books", [], {"id": 1, "price": 2}) == [
            {"id": 1, "title": "last", "price": 2.0}
        ]

    def test_select_one_column_string(self, data_access):
        assert data_access.select(ESCAPED_TABLE, FIRST) == [{FIRST: 1}, {FIRST: 2}]
        assert data_access.select("books", "price") == [{"price": 2.0}, {"price": 1.5}]

    def test_select_column_order(self, data_access):
        """Test result keys follow the requested column order."""
        price_id = data_access.select("books", ["price", "id"])
        id_price = data_access.select("books", ["id", "price"])

        assert [list(row) for row in price_id] == [["price", "id"], ["price", "id"]]
        assert [list(row) for row in id_price] == [["id", "price"], ["id", "price"]]

    def test_select_escaped_filter(self, data_access):
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 1}) == [{FIRST: 1, SECOND: 2}]

    def test_select_unknown_filter_returns_all(self, data_access):
        """Test unknown filter keys behave as no filter."""
        assert data_access.select("books", [], {"nope": 1}) == data_access.select("books")

    def test_select_sorted(self, data_access):
        """Test ORDER BY on escaped column names."""
        assert data_access.select(ESCAPED_TABLE, [], {}, FIRST) == [
            {FIRST: 1, SECOND: 2},
            {FIRST: 2, SECOND: 1},
        ]
        assert data_access.select(ESCAPED_TABLE, [], {}, SECOND) == [
            {FIRST: 2, SECOND: 1},
            {FIRST: 1, SECOND: 2},
        ]

    def test_select_sorted_desc(self, data_access):
        rows = data_access.select("books", ["title"], {}, "price desc")
        assert rows == [{"title": "last"}, {"title": "first"}]

    def test_select_unknown_order_column_ignored(self, data_access):
        """Test an injected order-by is dropped and the query still runs."""
        rows = data_access.select("books", ["id"], {}, "id; DROP TABLE books")

        assert rows == [{"id": 1}, {"id": 2}]
        assert data_access.get_table_columns("books") == ["id", "title", "price"]

    def test_select_injection_in_filter_value(self, data_access):
        """Test values are bound, not interpolated."""
        assert data_access.select("books", [], {"title": "x' OR '1'='1"}) == []

    def test_unknown_table_raises(self, data_access):
        with pytest.raises(StatementError, match="no such table: unknown"):
            data_access.select("unknown")


class TestInsert:
    """Test INSERT end to end."""

    def test_insert_one(self, data_access):
        data = {FIRST: 3, SECOND: 4}

        assert data_access.insert(ESCAPED_TABLE, data) == 1
        assert data_access.last_insert_id() == "3"
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 3}) == [data]

    def test_insert_filters_unknown_column(self, data_access):
        data = {FIRST: 3, SECOND: 4}

        assert data_access.insert(ESCAPED_TABLE, {**data, "unknownColumn": "none"}) == 1
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 3}) == [data]

    def test_insert_fills_missing_with_null(self, data_access):
        """Test later rows missing a column store NULL for it."""
        data = {FIRST: 3, SECOND: 4}

        count = data_access.insert(ESCAPED_TABLE, [{**data, "unknownColumn": "none"}, {SECOND: 3}])

        assert count == 2
        assert data_access.last_insert_id() == "4"
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 3}) == [data]
        assert data_access.select(ESCAPED_TABLE, [], {SECOND: 3}) == [{FIRST: None, SECOND: 3}]

    def test_insert_mixed_rows_first_row_columns(self, data_access, db):
        """Test insert("t", [{a:1,b:2},{a:3}]) on a (a, b) table."""
        db.execute("CREATE TABLE t (a INT, b INT)")

        assert data_access.insert("t", [{"a": 1, "b": 2}, {"a": 3}]) == 2
        assert data_access.select("t") == [{"a": 1, "b": 2}, {"a": 3, "b": None}]

    def test_insert_multiple(self, data_access):
        data = [{FIRST: 3, SECOND: 5}, {FIRST: 6, SECOND: 8}]

        assert data_access.insert(ESCAPED_TABLE, data) == 2
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 3}) == [data[0]]
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 6}) == [data[1]]

    def test_insert_only_unknown_column_raises(self, data_access):
        with pytest.raises(EmptyRequest, match="empty request"):
            data_access.insert(ESCAPED_TABLE, {"unknownColumn": "none"})

    @pytest.mark.parametrize("data", [None, {}, []])
    def test_insert_no_data_raises(self, data_access, data):
        with pytest.raises(EmptyRequest, match="empty request"):
            data_access.insert("books", data)

    def test_insert_no_valid_data_raises(self, data_access):
        with pytest.raises(EmptyRequest, match="empty request"):
            data_access.insert("books", {"not_existing": 1})

    def test_insert_no_data_silent(self, data_access):
        assert data_access.insert("books", None, allow_empty=True) == 0

    def test_insert_no_valid_data_silent(self, data_access):
        assert data_access.insert("books", {"not_existing": 1}, allow_empty=True) == 0
        assert len(data_access.select("books")) == 2

    def test_insert_constraint_violation_raises(self, data_access):
        """Test driver errors surface as StatementError."""
        with pytest.raises(StatementError, match="execute failed") as exc_info:
            data_access.insert(ESCAPED_TABLE, {FIRST: 9})

        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)


class TestUpdate:
    """Test UPDATE end to end."""

    def test_update_one(self, data_access):
        assert data_access.update(ESCAPED_TABLE, {SECOND: 0}, {FIRST: 1}) == 1
        assert data_access.select(ESCAPED_TABLE, [], {SECOND: 0}) == [{FIRST: 1, SECOND: 0}]

    def test_update_all(self, data_access):
        """Test an empty filter updates every row."""
        assert data_access.update(ESCAPED_TABLE, {FIRST: 0, SECOND: 0}, {}) == 2
        assert data_access.select(ESCAPED_TABLE, [], {FIRST: 0, SECOND: 0}) == [
            {FIRST: 0, SECOND: 0},
            {FIRST: 0, SECOND: 0},
        ]

    def test_update_unknown_filter_updates_all(self, data_access):
        assert data_access.update("books", {"price": 0}, {"nope": 1}) == 2
        assert [row["price"] for row in data_access.select("books")] == [0, 0]

    def test_update_same_column_in_set_and_filter(self, data_access):
        assert data_access.update("books", {"price": 9}, {"price": 2}) == 1
        assert data_access.select("books", "id", {"price": 9}) == [{"id": 1}]

    def test_update_no_data_raises(self, data_access):
        with pytest.raises(EmptyRequest, match="empty request"):
            data_access.update("books", None)

    def test_update_no_valid_data_raises(self, data_access):
        with pytest.raises(EmptyRequest, match="empty request"):
            data_access.update("books", {"not_existing": 1})

    def test_update_no_data_silent(self, data_access):
        assert data_access.update("books", None, {}, allow_empty=True) == 0

    def test_update_no_valid_data_silent(self, data_access):
        assert data_access.update("books", {"not_existing": 1}, {}, allow_empty=True) == 0


class TestDelete:
    """Test DELETE end to end."""

    def test_delete_none(self, data_access):
        assert data_access.delete(ESCAPED_TABLE, {FIRST: 0, SECOND: 0}) == 0
        assert data_access.select(ESCAPED_TABLE) == [{FIRST: 1, SECOND: 2}, {FIRST: 2, SECOND: 1}]

    def test_delete_one(self, data_access):
        assert data_access.delete(ESCAPED_TABLE, {FIRST: 1}) == 1
        assert data_access.select(ESCAPED_TABLE) == [{FIRST: 2, SECOND: 1}]

    def test_delete_all(self, data_access):
        assert data_access.delete(ESCAPED_TABLE) == 2
        assert data_access.select(ESCAPED_TABLE) == []


class TestOrderByStatement:
    """Test the public ORDER BY helper."""

    def test_order_by_default(self, data_access):
        assert data_access.create_order_by_statement(ESCAPED_TABLE, FIRST) == "ORDER BY `1``st`"

    def test_order_by_asc(self, data_access):
        stmt = data_access.create_order_by_statement(ESCAPED_TABLE, f"{FIRST} ASC")
        assert stmt == "ORDER BY `1``st` ASC"

    def test_order_by_desc(self, data_access):
        stmt = data_access.create_order_by_statement(ESCAPED_TABLE, f"{FIRST} DESC")
        assert stmt == "ORDER BY `1``st` DESC"

    def test_order_by_unknown_column(self, data_access):
        assert data_access.create_order_by_statement(ESCAPED_TABLE, "nope DESC") == ""


class TestRun:
    """Test raw statement execution."""

    def test_run_returns_statement(self, data_access):
        assert isinstance(data_access.run("ALTER TABLE books RENAME TO dvds"), sqlite3.Cursor)

    def test_run_failure_raises(self, data_access):
        with pytest.raises(StatementError, match="execute failed"):
            data_access.run("ALTER TABLE missing RENAME TO other")

    def test_run_failure_silent(self, data_access):
        """Test should_throw=False hands back the failed result."""
        result = data_access.run("ALTER TABLE missing RENAME TO other", should_throw=False)

        assert not result
        assert result.error.phase == StatementError.EXECUTE_FAILED

    def test_try_run_success(self, data_access):
        result = data_access.try_run("SELECT title FROM books WHERE id = ?", [2])

        assert result.ok
        assert result.value == [{"title": "first"}]


class TestDialectOverride:
    """Test forcing a dialect on a SQLite connection."""

    def test_quote_identifiers_default_sqlite(self, data_access):
        assert data_access.quote_identifiers("1`st") == "`1``st`"
        assert data_access.quote_identifiers("2``st") == "`2````st`"
        assert data_access.quote_identifiers("1`st.2`cd") == "`1``st`.`2``cd`"

    def test_ansi_dialect_on_sqlite(self, db):
        """Test the ANSI fallback quoting also works on SQLite."""
        da = DataAccess(db, dialect="other")

        # SQLite has no information_schema, so nothing is whitelisted
        assert da.get_table_columns("books") == []
        assert len(da.select("books")) == 2

    def test_qmark_paramstyle_on_sqlite(self, db):
        """Test positional bind lists work end to end."""
        da = DataAccess(db, dialect=SQLiteDialect(paramstyle="qmark"))
        rows = [{"id": 3, "title": "x", "price": 1}, {"id": 4, "title": "y", "price": 5}]

        assert da.insert("books", rows) == 2
        assert da.update("books", {"price": 7}, {"title": "y", "id": 4}) == 1
        assert da.select("books", ["id", "price"], {"price": 7}, "id") == [{"id": 4, "price": 7.0}]
        assert da.delete("books", {"id": 3}) == 1
        assert [row["id"] for row in da.select("books", "id", {}, "id")] == [1, 2, 4]
