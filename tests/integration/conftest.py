"""
Pytest configuration for integration tests.

Provides a fresh in-memory SQLite database per test with two tables:
- books(id, title, price) with two rows
- `test``escp`(`1``st`, `2````st`): table and column names containing
  backticks, to exercise identifier escaping end to end
"""

import sqlite3

import pytest

from ff_data_access import DataAccess


@pytest.fixture
def db():
    """
    In-memory SQLite connection with the test schema loaded.
    """
    conn = sqlite3.connect(":memory:")
    conn.executescript(
        """
        CREATE TABLE books (
            id INT NOT NULL PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            price REAL NOT NULL
        );
        INSERT INTO books (id, title, price) VALUES (1, 'last', 2), (2, 'first', 1.50);

        CREATE TABLE `test``escp` (`1``st` INT, `2````st` INT NOT NULL);
        INSERT INTO `test``escp` (`1``st`, `2````st`) VALUES (1, 2), (2, 1);
        """
    )

    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def data_access(db):
    return DataAccess(db)
