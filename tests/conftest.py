"""Shared fixtures for dbgate tests.

Tools run against an in-memory SQLite database wrapped in a counting
adapter, so tests can assert whether a statement reached the connection.
"""

from collections.abc import Iterator
from typing import Any

import pytest

from dbgate.database.adapters import SQLiteAdapter
from dbgate.settings import Settings
from dbgate.tools import DatabaseContext

USERS = [
    {"id": 1, "name": "Alice", "email": "alice@example.com", "age": 30},
    {"id": 2, "name": "Bob", "email": "bob@example.com", "age": 25},
    {"id": 3, "name": "Carol", "email": None, "age": 41},
]

SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT,
    age INTEGER DEFAULT 0
);
CREATE TABLE admin_settings (key TEXT PRIMARY KEY, value TEXT);
INSERT INTO admin_settings VALUES ('api_key', 'secret');
"""


class CountingAdapter(SQLiteAdapter):
    """SQLite adapter that records every statement sent through it."""

    def __init__(self, connection_string: str):
        super().__init__(connection_string)
        self.query_calls: list[str] = []
        self.execute_calls: list[str] = []

    def query(self, sql: str, parameters: Any = None, timeout: Any = None) -> list[dict[str, Any]]:
        self.query_calls.append(sql)
        return super().query(sql, parameters, timeout)

    def execute(self, sql: str, parameters: Any = None, timeout: Any = None) -> int:
        self.execute_calls.append(sql)
        return super().execute(sql, parameters, timeout)

    @property
    def call_count(self) -> int:
        return len(self.query_calls) + len(self.execute_calls)


@pytest.fixture
def empty_connection() -> Iterator[CountingAdapter]:
    """Connected in-memory SQLite database with no tables."""
    adapter = CountingAdapter("Data Source=:memory:")
    adapter.connect()
    yield adapter
    adapter.close()


@pytest.fixture
def connection(empty_connection: CountingAdapter) -> CountingAdapter:
    """In-memory database with users and admin_settings tables."""
    empty_connection.connection.executescript(SCHEMA)
    empty_connection.connection.executemany(
        "INSERT INTO users (id, name, email, age) VALUES (:id, :name, :email, :age)", USERS
    )
    return empty_connection


@pytest.fixture
def settings() -> Settings:
    return Settings(
        provider="SQLite",
        command_timeout=30,
        query_execution_limit=1000,
        allowed_commands=("SELECT", "WITH"),
        restricted_tables=("admin_settings",),
        connection_strings={"DefaultConnection": "Data Source=:memory:"},
    )


@pytest.fixture
def context(connection: CountingAdapter, settings: Settings) -> DatabaseContext:
    return DatabaseContext(connection=connection, settings=settings)
