"""Database integration module for dbgate.

This module provides the connection, validation and dialect layer behind
the MCP tools.

Architecture:
- providers.py: Provider enum and dialect-specific catalog SQL
- validation.py: Command allow-list and restricted table checks
- parameters.py: JSON parameter decoding and placeholder binding
- connection.py: Connection string parsing and connection startup
- formatting.py: Result serialization
- adapters/: Database-specific implementations (SQLite, SQL Server, PostgreSQL, MySQL)
"""

from dbgate.database.connection import open_connection, parse_connection_string, parse_dsn
from dbgate.database.formatting import format_rows
from dbgate.database.parameters import bind_parameters, parse_parameters
from dbgate.database.providers import Provider, select_dialect
from dbgate.database.validation import validate_allowed_command, validate_table_access

__all__ = [
    "Provider",
    "bind_parameters",
    "format_rows",
    "open_connection",
    "parse_connection_string",
    "parse_dsn",
    "parse_parameters",
    "select_dialect",
    "validate_allowed_command",
    "validate_table_access",
]
