"""Abstract base class for database adapters."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional

from dbgate.constants import DEFAULT_CONNECTION_TIMEOUT
from dbgate.database.parameters import ParamStyle, bind_parameters
from dbgate.database.providers import Provider

STATE_OPEN = "Open"
STATE_CLOSED = "Closed"


class BaseAdapter(ABC):
    """Abstract base class for database-specific adapters.

    Each database type (SQLite, SQL Server, PostgreSQL, MySQL) implements
    this interface so the tool layer can run statements without knowing
    which engine sits behind the connection. Statements use ``@name``
    placeholders; subclasses declare their driver's ``paramstyle``.
    """

    provider: Provider
    paramstyle: ParamStyle

    def __init__(self, connection_string: str):
        """Initialize adapter with connection parameters.

        Args:
            connection_string: Database connection string as configured
        """
        self.connection_string = connection_string
        self.connection: Optional[Any] = None

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close database connection and release resources."""
        pass

    @property
    @abstractmethod
    def database(self) -> str:
        """Name of the current database."""
        pass

    @property
    def state(self) -> str:
        """"Open" while connected, "Closed" otherwise."""
        return STATE_OPEN if self.connection is not None else STATE_CLOSED

    @property
    def connection_timeout(self) -> int:
        """Seconds to wait while establishing the connection."""
        return DEFAULT_CONNECTION_TIMEOUT

    @contextmanager
    def statement_timeout(self, cursor: Any, timeout: Optional[float]) -> Iterator[None]:
        """Apply a per-statement timeout for the duration of the block.

        Subclasses override this with their engine's mechanism. A falsy
        timeout means no limit.
        """
        yield

    def translate_error(self, error: Exception, timeout: Optional[float]) -> Exception:
        """Map a driver exception to the exception raised to callers."""
        return error

    def query(
        self,
        sql: str,
        parameters: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> list[dict[str, Any]]:
        """Execute a statement and return every row.

        Args:
            sql: Statement with optional @name placeholders
            parameters: Parameter values by name
            timeout: Statement timeout in seconds (None for no limit)

        Returns:
            List of result rows as column -> value dictionaries (empty if
            the statement produced no result set)

        Raises:
            ConnectionError: If not connected
            TimeoutError: If the statement exceeds the timeout
        """
        cursor = self._cursor()
        try:
            return self._run(cursor, sql, parameters, timeout, fetch=self._fetch_rows)
        finally:
            cursor.close()

    def execute(
        self,
        sql: str,
        parameters: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Execute a statement that returns no rows.

        Returns:
            Number of rows affected as reported by the driver (-1 when
            the driver cannot tell, e.g. for DDL)
        """
        cursor = self._cursor()
        try:
            self._run(cursor, sql, parameters, timeout)
            return cursor.rowcount
        finally:
            cursor.close()

    def _cursor(self) -> Any:
        if not self.connection:
            raise ConnectionError("Not connected to database. Call connect() first.")
        return self.connection.cursor()

    @staticmethod
    def _fetch_rows(cursor: Any) -> list[dict[str, Any]]:
        if cursor.description is None:
            return []
        columns = [column[0] for column in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def _run(
        self,
        cursor: Any,
        sql: str,
        parameters: Optional[Mapping[str, Any]],
        timeout: Optional[float],
        fetch: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """Bind and execute one statement, then fetch under the same timeout.

        sqlite3 computes rows while fetching, so ``fetch`` runs inside the
        timeout block.
        """
        statement, args = bind_parameters(sql, parameters, self.paramstyle)
        try:
            with self.statement_timeout(cursor, timeout):
                if args is None or args == ():
                    cursor.execute(statement)
                else:
                    cursor.execute(statement, args)
                return fetch(cursor) if fetch is not None else None
        except Exception as e:
            translated = self.translate_error(e, timeout)
            if translated is e:
                raise
            raise translated from e

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
