"""Database tool implementations exposed over MCP.

Each tool takes the shared :class:`DatabaseContext` plus the client's
arguments and returns a :class:`ToolResult`. Failures are never raised to
the caller; they come back as FAILED results whose message embeds the
underlying error. The server turns results into text only when replying.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .constants import (
    MSG_BACKUP_FAILED,
    MSG_BACKUP_SUCCESS,
    MSG_COMMAND_FAILED,
    MSG_COMMAND_SUCCESS,
    MSG_CONNECTION_INFO,
    MSG_CONNECTION_INFO_FAILED,
    MSG_NO_RESULTS,
    MSG_QUERY_BLOCKED,
    MSG_QUERY_FAILED,
    MSG_QUERY_SUCCESS,
    MSG_SCHEMA_FAILED,
    MSG_TABLE_LIST,
    MSG_TABLE_RESTRICTED,
    MSG_TABLE_SCHEMA,
    MSG_USE_EXECUTE_QUERY,
)
from .database.adapters import BaseAdapter
from .database.formatting import format_rows, format_table_list, to_json
from .database.logging import (
    QueryTimer,
    log_parameter,
    log_query_blocked,
    log_query_execution,
    log_query_start,
    log_schema_retrieval,
    log_table_denied,
)
from .database.parameters import parse_parameters
from .database.providers import select_dialect
from .database.validation import is_select_statement, validate_allowed_command, validate_table_access
from .settings import Settings

logger = logging.getLogger("dbgate")

Parameters = Union[str, Mapping[str, Any], None]


class Outcome(Enum):
    """How a tool call ended."""

    SUCCESS = "success"
    EMPTY = "empty"
    BLOCKED = "blocked"
    DENIED = "denied"
    REDIRECTED = "redirected"
    FAILED = "failed"


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a tool call plus the exact text returned to the client.

    ``data`` holds the structured payload behind the message (rows, table
    names, affected row count, connection info) when there is one.
    """

    outcome: Outcome
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.SUCCESS, Outcome.EMPTY)

    def __str__(self) -> str:
        return self.message


@dataclass
class DatabaseContext:
    """The open connection and configuration snapshot shared by all tools."""

    connection: BaseAdapter
    settings: Settings


async def execute_query(context: DatabaseContext, query: str, parameters: Parameters = "{}") -> ToolResult:
    """Run a read query after the command allow-list check.

    The full result set is fetched and its size logged; the response holds
    at most ``query_execution_limit`` rows.
    """
    settings = context.settings
    query = query or ""

    is_valid, reason = validate_allowed_command(query, settings.allowed_commands)
    if not is_valid:
        log_query_blocked(query, reason)
        return ToolResult(Outcome.BLOCKED, MSG_QUERY_BLOCKED)

    try:
        limit = settings.query_execution_limit
        log_query_start(query, limit)

        params = parse_parameters(parameters)
        for name in params:
            log_parameter(name)

        with QueryTimer() as timer:
            rows = await asyncio.to_thread(
                context.connection.query, query, params, settings.command_timeout
            )

        log_query_execution(query, success=True, row_count=len(rows), duration=timer.duration)

        if not rows:
            return ToolResult(Outcome.EMPTY, MSG_NO_RESULTS, data=[])

        limited_rows = rows[:limit]
        return ToolResult(
            Outcome.SUCCESS,
            MSG_QUERY_SUCCESS.format(results=format_rows(limited_rows)),
            data=limited_rows,
        )

    except Exception as e:
        logger.error(f"Query execution failed: {query}", exc_info=True)
        log_query_execution(query, success=False, error=str(e))
        return ToolResult(Outcome.FAILED, MSG_QUERY_FAILED.format(error=e))


async def get_table_schema(context: DatabaseContext, table_name: Optional[str] = "") -> ToolResult:
    """List all tables, or describe one table's columns.

    Restricted tables are refused before any SQL runs. Listing does not
    consult the restricted list.
    """
    settings = context.settings
    dialect = select_dialect(settings.provider)
    provider = dialect.provider.value
    logger.debug(f"Getting schema information for provider: {settings.provider}, table: {table_name}")

    try:
        if not table_name:
            rows = await asyncio.to_thread(context.connection.query, dialect.list_tables_sql)
            tables = [next(iter(row.values())) for row in rows]
            log_schema_retrieval(provider, None, success=True, table_count=len(tables))
            return ToolResult(
                Outcome.SUCCESS,
                MSG_TABLE_LIST.format(tables=format_table_list(tables)),
                data=tables,
            )

        is_allowed, _ = validate_table_access(table_name, settings.restricted_tables)
        if not is_allowed:
            log_table_denied(table_name)
            return ToolResult(Outcome.DENIED, MSG_TABLE_RESTRICTED)

        schema = await asyncio.to_thread(
            context.connection.query, dialect.describe_table_sql, {"tableName": table_name}
        )
        log_schema_retrieval(provider, table_name, success=True)
        return ToolResult(
            Outcome.SUCCESS,
            MSG_TABLE_SCHEMA.format(table=table_name, schema=format_rows(schema)),
            data=schema,
        )

    except Exception as e:
        logger.error(f"Schema retrieval failed for table: {table_name}", exc_info=True)
        log_schema_retrieval(provider, table_name, success=False, error=str(e))
        return ToolResult(Outcome.FAILED, MSG_SCHEMA_FAILED.format(error=e))


async def execute_non_query(context: DatabaseContext, command: str, parameters: Parameters = "{}") -> ToolResult:
    """Run an INSERT/UPDATE/DELETE style command and report affected rows.

    SELECT statements are redirected to ExecuteQuery. This path applies
    neither the command allow-list nor a statement timeout.
    """
    if is_select_statement(command):
        return ToolResult(Outcome.REDIRECTED, MSG_USE_EXECUTE_QUERY)

    try:
        params = parse_parameters(parameters)
        rows_affected = await asyncio.to_thread(context.connection.execute, command, params)
        return ToolResult(
            Outcome.SUCCESS,
            MSG_COMMAND_SUCCESS.format(count=rows_affected),
            data=rows_affected,
        )
    except Exception as e:
        return ToolResult(Outcome.FAILED, MSG_COMMAND_FAILED.format(error=e))


async def backup_table(context: DatabaseContext, table_name: str, backup_path: str) -> ToolResult:
    """Dump every row of a table to a JSON file, overwriting it.

    The table name is interpolated into the SELECT as given and is not
    checked against the restricted list.
    """
    try:
        rows = await asyncio.to_thread(context.connection.query, f"SELECT * FROM {table_name}")
        json_backup = format_rows(rows)
        await asyncio.to_thread(Path(backup_path).write_text, json_backup, encoding="utf-8")

        return ToolResult(
            Outcome.SUCCESS,
            MSG_BACKUP_SUCCESS.format(table=table_name, path=backup_path),
            data=len(rows),
        )
    except Exception as e:
        return ToolResult(Outcome.FAILED, MSG_BACKUP_FAILED.format(error=e))


async def get_connection_info(context: DatabaseContext) -> ToolResult:
    """Report database name, connection string, state and connect timeout."""
    try:
        connection = context.connection
        # NOTE: the connection string is reported verbatim, credentials included
        info = {
            "Database": connection.database,
            "ConnectionString": connection.connection_string,
            "State": connection.state,
            "ConnectionTimeout": connection.connection_timeout,
        }
        return ToolResult(Outcome.SUCCESS, MSG_CONNECTION_INFO.format(info=to_json(info)), data=info)
    except Exception as e:
        return ToolResult(Outcome.FAILED, MSG_CONNECTION_INFO_FAILED.format(error=e))
