"""SQL Server database adapter implementation."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

try:
    import pyodbc
except ImportError:
    pyodbc = None

from .base import BaseAdapter
from ..parameters import ParamStyle
from ..providers import Provider
from dbgate.constants import DEFAULT_CONNECTION_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"

# SQLSTATE raised by the ODBC driver when Connection.timeout expires
TIMEOUT_SQLSTATE = "HYT00"

# SqlClient connection string keys -> ODBC keys
_ODBC_KEYS = {
    "server": "SERVER",
    "datasource": "SERVER",
    "address": "SERVER",
    "database": "DATABASE",
    "initialcatalog": "DATABASE",
    "userid": "UID",
    "uid": "UID",
    "user": "UID",
    "password": "PWD",
    "pwd": "PWD",
    "encrypt": "Encrypt",
    "trustservercertificate": "TrustServerCertificate",
    "trustedconnection": "Trusted_Connection",
    "integratedsecurity": "Trusted_Connection",
    "applicationname": "APP",
    "multisubnetfailover": "MultiSubnetFailover",
}


class SQLServerAdapter(BaseAdapter):
    """SQL Server database adapter using the pyodbc driver.

    Accepts SqlClient-style strings ("Server=...;Database=...;User Id=...;
    Password=...;TrustServerCertificate=True") which are translated to an
    ODBC connection string, or raw ODBC strings that name a Driver.
    """

    provider = Provider.SQLSERVER
    paramstyle = ParamStyle.QMARK

    def __init__(self, connection_string: str):
        """Initialize SQL Server adapter.

        Args:
            connection_string: SqlClient or ODBC connection string
        """
        from ..connection import first_value, parse_connection_string

        if pyodbc is None:
            raise ImportError(
                "pyodbc is not installed. Install it with: pip install pyodbc"
            )

        super().__init__(connection_string)
        self.options = parse_connection_string(connection_string)
        self._database = first_value(self.options, "database", "initialcatalog", default="")
        self._connection_timeout = int(first_value(
            self.options, "connecttimeout", "connectiontimeout", "timeout",
            default=str(DEFAULT_CONNECTION_TIMEOUT),
        ))

    def odbc_connection_string(self) -> str:
        """Build the ODBC connection string passed to pyodbc."""
        if "driver" in self.options:
            return self.connection_string

        parts = {"DRIVER": "{" + DEFAULT_ODBC_DRIVER + "}"}
        for key, value in self.options.items():
            odbc_key = _ODBC_KEYS.get(key)
            if odbc_key is None:
                continue
            if odbc_key == "Trusted_Connection":
                value = "yes" if value.lower() in ("true", "yes", "sspi") else "no"
            elif odbc_key in ("Encrypt", "TrustServerCertificate", "MultiSubnetFailover"):
                value = "yes" if value.lower() in ("true", "yes", "mandatory", "strict") else "no"
            elif ";" in value or value.startswith("{"):
                value = "{" + value.replace("}", "}}") + "}"
            parts[odbc_key] = value

        return ";".join(f"{key}={value}" for key, value in parts.items())

    @property
    def database(self) -> str:
        if self.connection is not None:
            try:
                return self.connection.getinfo(pyodbc.SQL_DATABASE_NAME)
            except pyodbc.Error:
                pass
        return self._database

    @property
    def connection_timeout(self) -> int:
        return self._connection_timeout

    def connect(self) -> None:
        """Establish SQL Server connection in autocommit mode."""
        try:
            self.connection = pyodbc.connect(
                self.odbc_connection_string(),
                timeout=self._connection_timeout,
                autocommit=True,
            )
            logger.info(f"Connected to SQL Server database: {self._database}")

        except pyodbc.Error as e:
            error_msg = f"Failed to connect to SQL Server: {e}"
            logger.error(error_msg)
            raise ConnectionError(error_msg) from e

    @contextmanager
    def statement_timeout(self, cursor: Any, timeout: Optional[float]) -> Iterator[None]:
        """Apply the ODBC query timeout (whole seconds) around the statement."""
        if not timeout:
            yield
            return

        self.connection.timeout = max(1, int(timeout))
        try:
            yield
        finally:
            self.connection.timeout = 0

    def translate_error(self, error: Exception, timeout: Optional[float]) -> Exception:
        if isinstance(error, pyodbc.Error) and error.args and error.args[0] == TIMEOUT_SQLSTATE:
            return TimeoutError(f"Query exceeded timeout ({timeout}s): {error}")
        return error

    def close(self) -> None:
        """Close database connection."""
        if self.connection:
            try:
                self.connection.close()
                logger.info(f"Closed SQL Server connection to {self._database}")
            except Exception as e:
                logger.warning(f"Error closing SQL Server connection: {e}")
            finally:
                self.connection = None
