"""Database adapters for different database types."""

from .base import BaseAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .sqlserver import SQLServerAdapter
from ..providers import Provider

__all__ = [
    "BaseAdapter",
    "MySQLAdapter",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
    "SQLServerAdapter",
    "ADAPTERS",
    "create_adapter",
]

ADAPTERS: dict[Provider, type[BaseAdapter]] = {
    Provider.SQLITE: SQLiteAdapter,
    Provider.SQLSERVER: SQLServerAdapter,
    Provider.POSTGRESQL: PostgreSQLAdapter,
    Provider.MYSQL: MySQLAdapter,
}


def create_adapter(provider: Provider, connection_string: str) -> BaseAdapter:
    """Factory function to create appropriate adapter based on provider.

    Args:
        provider: Database provider
        connection_string: Connection string for that provider

    Returns:
        Unconnected adapter instance
    """
    return ADAPTERS[provider](connection_string)
