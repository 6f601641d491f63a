"""PostgreSQL database adapter implementation."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

try:
    import psycopg2
    import psycopg2.errors
except ImportError:
    psycopg2 = None

from .base import BaseAdapter
from ..parameters import ParamStyle
from ..providers import Provider
from dbgate.constants import DEFAULT_CONNECTION_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5432


class PostgreSQLAdapter(BaseAdapter):
    """PostgreSQL database adapter using the psycopg2 driver.

    Accepts Npgsql-style strings ("Host=...;Port=5432;Database=...;
    Username=...;Password=...;Timeout=15") or postgresql:// URLs.
    """

    provider = Provider.POSTGRESQL
    paramstyle = ParamStyle.PYFORMAT

    def __init__(self, connection_string: str):
        """Initialize PostgreSQL adapter.

        Args:
            connection_string: Npgsql-style connection string or DSN URL
        """
        if psycopg2 is None:
            raise ImportError(
                "psycopg2 is not installed. Install it with: pip install psycopg2-binary"
            )

        super().__init__(connection_string)
        self.params = self._parse(connection_string)

    @staticmethod
    def _parse(connection_string: str) -> dict[str, Any]:
        from ..connection import first_value, parse_connection_string, parse_dsn

        if "://" in connection_string:
            parts = parse_dsn(connection_string)
            return {
                "host": parts["host"] or "localhost",
                "port": parts["port"] or DEFAULT_PORT,
                "database": parts["database"],
                "user": parts["username"],
                "password": parts["password"],
                "connect_timeout": int(parts["options"].get("connect_timeout", DEFAULT_CONNECTION_TIMEOUT)),
            }

        options = parse_connection_string(connection_string)
        return {
            "host": first_value(options, "host", "server", default="localhost"),
            "port": int(first_value(options, "port", default=str(DEFAULT_PORT))),
            "database": first_value(options, "database", "db"),
            "user": first_value(options, "username", "userid", "user", "uid"),
            "password": first_value(options, "password", "pwd"),
            "connect_timeout": int(first_value(options, "timeout", "connecttimeout", "connectiontimeout",
                                               default=str(DEFAULT_CONNECTION_TIMEOUT))),
        }

    @property
    def database(self) -> str:
        return self.params.get("database") or ""

    @property
    def connection_timeout(self) -> int:
        return self.params["connect_timeout"]

    def connect(self) -> None:
        """Establish database connection in autocommit mode."""
        try:
            conn_params = {key: value for key, value in self.params.items() if value is not None}
            if "database" in conn_params:
                conn_params["dbname"] = conn_params.pop("database")

            self.connection = psycopg2.connect(**conn_params)
            self.connection.autocommit = True

            logger.info(f"Connected to PostgreSQL database: {self.database}@{self.params['host']}")

        except psycopg2.Error as e:
            error_msg = f"Failed to connect to PostgreSQL: {e}"
            logger.error(error_msg)
            raise ConnectionError(error_msg) from e

    @contextmanager
    def statement_timeout(self, cursor: Any, timeout: Optional[float]) -> Iterator[None]:
        """Set the session statement_timeout (milliseconds) around the statement."""
        if not timeout:
            yield
            return

        cursor.execute("SET statement_timeout = %s", (int(timeout * 1000),))
        try:
            yield
        finally:
            cursor.execute("RESET statement_timeout")

    def translate_error(self, error: Exception, timeout: Optional[float]) -> Exception:
        if isinstance(error, psycopg2.errors.QueryCanceled):
            return TimeoutError(f"Query exceeded timeout ({timeout}s): {error}")
        return error

    def close(self) -> None:
        """Close database connection."""
        if self.connection:
            try:
                self.connection.close()
                logger.info(f"Closed PostgreSQL connection to {self.database}")
            except Exception as e:
                logger.warning(f"Error closing PostgreSQL connection: {e}")
            finally:
                self.connection = None
