"""SQLite database adapter implementation."""

import logging
import sqlite3
import time
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from .base import BaseAdapter
from ..parameters import ParamStyle
from ..providers import Provider

logger = logging.getLogger(__name__)

# Virtual machine instructions between timeout checks
PROGRESS_HANDLER_INTERVAL = 1000


def split_statements(sql: str) -> list[str]:
    """Split SQL text into complete statements.

    Semicolons inside literals, comments and trigger bodies do not end a
    statement; ``sqlite3.complete_statement`` decides where one ends.
    Blank statements are dropped.
    """
    statements = []
    buffer = ""
    for piece in (sql or "").split(";"):
        buffer += piece + ";"
        if sqlite3.complete_statement(buffer):
            if buffer.strip(" \t\r\n;"):
                statements.append(buffer.strip())
            buffer = ""
    if buffer.strip(" \t\r\n;"):
        statements.append(buffer.strip().rstrip(";"))
    return statements


class SQLiteAdapter(BaseAdapter):
    """SQLite database adapter using the stdlib sqlite3 driver.

    Accepts "Data Source=app.db" (optionally with "Mode=ReadOnly" or
    "Mode=Memory"), "sqlite:///app.db", or a bare path.
    """

    provider = Provider.SQLITE
    paramstyle = ParamStyle.NAMED

    def __init__(self, connection_string: str):
        """Initialize SQLite adapter.

        Args:
            connection_string: SQLite connection string or database path
        """
        super().__init__(connection_string)
        self.database_path, self.read_only = self._parse(connection_string)

    @staticmethod
    def _parse(connection_string: str) -> tuple[str, bool]:
        from ..connection import first_value, parse_connection_string, parse_dsn

        text = (connection_string or "").strip()
        if "://" in text:
            parts = parse_dsn(text)
            mode = parts["options"].get("mode", "")
            return parts["database"] or ":memory:", mode.lower() in ("ro", "readonly")
        if "=" not in text:
            return text or ":memory:", False

        options = parse_connection_string(text)
        mode = (options.get("mode") or "").lower()
        if mode == "memory":
            return ":memory:", False
        path = first_value(options, "datasource", "filename", "database", default=":memory:")
        return path, mode == "readonly"

    @property
    def database(self) -> str:
        # SQLite names the primary database schema "main"
        return "main"

    def connect(self) -> None:
        """Open the database file (autocommit, usable across threads)."""
        try:
            if self.read_only:
                target = f"file:{self.database_path}?mode=ro"
            else:
                target = self.database_path
            self.connection = sqlite3.connect(
                target,
                timeout=self.connection_timeout,
                uri=self.read_only,
                isolation_level=None,
                check_same_thread=False,  # Allow use across threads
            )
            logger.info(f"Connected to SQLite database: {self.database_path}")

        except sqlite3.Error as e:
            error_msg = f"Failed to connect to SQLite: {e}"
            logger.error(error_msg)
            raise ConnectionError(error_msg) from e

    def execute(
        self,
        sql: str,
        parameters: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Execute one or more ``;``-separated statements.

        Each statement runs on its own in autocommit mode and sees the same
        parameters. Returns the total rows affected, or -1 if no statement
        reported a count.
        """
        statements = split_statements(sql)
        if len(statements) <= 1:
            return super().execute(sql, parameters, timeout)

        total = -1
        for statement in statements:
            affected = super().execute(statement, parameters, timeout)
            if affected >= 0:
                total = max(total, 0) + affected
        return total

    @contextmanager
    def statement_timeout(self, cursor: Any, timeout: Optional[float]) -> Iterator[None]:
        """Interrupt the statement once the deadline passes."""
        if not timeout:
            yield
            return

        deadline = time.monotonic() + timeout
        self.connection.set_progress_handler(
            lambda: 1 if time.monotonic() > deadline else 0,
            PROGRESS_HANDLER_INTERVAL,
        )
        try:
            yield
        finally:
            self.connection.set_progress_handler(None, PROGRESS_HANDLER_INTERVAL)

    def translate_error(self, error: Exception, timeout: Optional[float]) -> Exception:
        if isinstance(error, sqlite3.OperationalError) and timeout and "interrupted" in str(error).lower():
            return TimeoutError(f"Query exceeded timeout ({timeout}s): {error}")
        return error

    def close(self) -> None:
        """Close database connection."""
        if self.connection:
            try:
                self.connection.close()
                logger.info(f"Closed SQLite connection to {self.database_path}")
            except Exception as e:
                logger.warning(f"Error closing SQLite connection: {e}")
            finally:
                self.connection = None
