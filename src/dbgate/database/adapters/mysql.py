"""MySQL database adapter implementation."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import pymysql

from dbgate.constants import DEFAULT_CONNECTION_TIMEOUT
from dbgate.database.adapters.base import BaseAdapter
from dbgate.database.parameters import ParamStyle
from dbgate.database.providers import Provider

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3306

# ER_QUERY_TIMEOUT: "Query execution was interrupted, maximum statement execution time exceeded"
ER_QUERY_TIMEOUT = 3024


class MySQLAdapter(BaseAdapter):
    """MySQL-specific database adapter using pymysql driver.

    Accepts MySqlConnector-style strings ("Server=...;Port=3306;Database=...;
    User ID=...;Password=...") or mysql:// URLs.
    """

    provider = Provider.MYSQL
    paramstyle = ParamStyle.PYFORMAT

    def __init__(self, connection_string: str):
        """Initialize MySQL adapter.

        Args:
            connection_string: MySQL connection string or DSN URL
        """
        super().__init__(connection_string)
        self.params = self._parse(connection_string)

    @staticmethod
    def _parse(connection_string: str) -> dict[str, Any]:
        from dbgate.database.connection import first_value, parse_connection_string, parse_dsn

        if "://" in connection_string:
            parts = parse_dsn(connection_string)
            return {
                "host": parts["host"] or "localhost",
                "port": parts["port"] or DEFAULT_PORT,
                "database": parts["database"],
                "user": parts["username"],
                "password": parts["password"] or "",
                "connect_timeout": DEFAULT_CONNECTION_TIMEOUT,
            }

        options = parse_connection_string(connection_string)
        return {
            "host": first_value(options, "server", "host", "datasource", default="localhost"),
            "port": int(first_value(options, "port", default=str(DEFAULT_PORT))),
            "database": first_value(options, "database", "initialcatalog"),
            "user": first_value(options, "userid", "uid", "user", "username"),
            "password": first_value(options, "password", "pwd", default=""),
            "connect_timeout": int(first_value(options, "connecttimeout", "connectiontimeout",
                                               default=str(DEFAULT_CONNECTION_TIMEOUT))),
        }

    @property
    def database(self) -> str:
        return self.params.get("database") or ""

    @property
    def connection_timeout(self) -> int:
        return self.params["connect_timeout"]

    def connect(self) -> None:
        """Establish MySQL connection.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            connection_params = {
                "host": self.params["host"],
                "port": self.params["port"],
                "user": self.params["user"],
                "password": self.params["password"],
                "connect_timeout": self.params["connect_timeout"],
                "charset": "utf8mb4",
                "autocommit": True,
            }

            # Only add database parameter if specified
            if self.params["database"]:
                connection_params["database"] = self.params["database"]

            self.connection = pymysql.connect(**connection_params)
            logger.info(f"Connected to MySQL database: {self.database}@{self.params['host']}")

        except pymysql.Error as e:
            raise ConnectionError(
                f"Failed to connect to MySQL database\n"
                f"  Error: {e}\n"
                f"  Hint: Check that MySQL server is running and credentials are correct"
            ) from e

    @contextmanager
    def statement_timeout(self, cursor: Any, timeout: Optional[float]) -> Iterator[None]:
        """Limit SELECT execution time via max_execution_time (milliseconds)."""
        if not timeout:
            yield
            return

        cursor.execute("SET SESSION max_execution_time = %s", (int(timeout * 1000),))
        try:
            yield
        finally:
            cursor.execute("SET SESSION max_execution_time = 0")

    def translate_error(self, error: Exception, timeout: Optional[float]) -> Exception:
        if isinstance(error, pymysql.err.OperationalError) and error.args and error.args[0] == ER_QUERY_TIMEOUT:
            return TimeoutError(f"Query exceeded timeout ({timeout}s): {error}")
        return error

    def close(self) -> None:
        """Close MySQL connection."""
        if self.connection:
            try:
                self.connection.close()
            except pymysql.Error as e:
                logger.warning(f"Error closing MySQL connection: {e}")
            finally:
                self.connection = None
