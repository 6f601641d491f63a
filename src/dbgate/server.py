"""dbgate MCP server - Query, inspect and back up a SQL database over MCP."""

import sys
import logging
from typing import Any, Optional

from mcp.server import Server
import mcp.server.stdio
import mcp.types as types
from mcp.server.models import InitializationOptions
from mcp.server.lowlevel import NotificationOptions

from .constants import SERVER_NAME, SERVER_VERSION, EXIT_SUCCESS, EXIT_FAILURE
from .database.connection import open_connection
from .database.logging import sanitize_connection_string
from .settings import ConfigurationError, Settings, load_settings
from .tool_definitions import ToolDescriptions
from . import tools

# Set up dbgate logger; stdout carries the MCP protocol, so logs go to stderr
logger = logging.getLogger("dbgate")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler(sys.stderr)
handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
logger.addHandler(handler)

# Logging:LogLevel names -> logging levels
LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "information": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "none": logging.CRITICAL + 10,
}

USAGE = (
    "Usage: dbgate [--config-dir <dir>] [--environment <name>] [--test]\n"
    "\n"
    "Optional Flags:\n"
    "  --config-dir <dir>    - Directory containing appsettings.json (default: current directory)\n"
    "  --environment <name>  - Also load appsettings.<name>.json (default: $DBGATE_ENVIRONMENT or Production)\n"
    "  --test                - Test the database connection and exit\n"
)


def configure_logging(level_name: str) -> None:
    """Apply the configured Logging:LogLevel:Default to the dbgate logger."""
    level = LOG_LEVELS.get(level_name.lower())
    if level is None:
        logger.warning(f"Unknown log level '{level_name}', using Information")
        level = logging.INFO
    logger.setLevel(level)


class DatabaseServer(Server):
    """Extended MCP Server that holds the shared database context."""

    def __init__(self, name: str, context: tools.DatabaseContext):
        super().__init__(name)
        self.context = context


async def dispatch_tool(context: tools.DatabaseContext, name: str, arguments: Optional[dict]) -> str:
    """Route one tool call to its implementation and return the reply text."""
    arguments = arguments or {}

    if name == ToolDescriptions.EXECUTE_QUERY:
        result = await tools.execute_query(
            context, arguments.get("query", ""), arguments.get("parameters", "{}")
        )
    elif name == ToolDescriptions.GET_TABLE_SCHEMA:
        result = await tools.get_table_schema(context, arguments.get("tableName", ""))
    elif name == ToolDescriptions.EXECUTE_NON_QUERY:
        result = await tools.execute_non_query(
            context, arguments.get("command", ""), arguments.get("parameters", "{}")
        )
    elif name == ToolDescriptions.BACKUP_TABLE:
        result = await tools.backup_table(
            context, arguments.get("tableName", ""), arguments.get("backupPath", "")
        )
    elif name == ToolDescriptions.GET_CONNECTION_INFO:
        result = await tools.get_connection_info(context)
    else:
        return f"Error: Unknown tool '{name}'"

    return str(result)


def create_server(context: tools.DatabaseContext) -> DatabaseServer:
    """Build the MCP server and register its handlers."""
    server = DatabaseServer(SERVER_NAME, context)

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        """List available resources (none for this server)."""
        return []

    @server.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        """List available prompts (none for this server)."""
        return []

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        """List the database tools."""
        return [types.Tool(**schema) for schema in ToolDescriptions.get_tool_schemas(context.settings)]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        """Handle tool calls."""
        logger.debug(f"call_tool invoked: {name}")
        try:
            text = await dispatch_tool(server.context, name, arguments)
        except Exception as e:
            # Tools report their own failures; this only guards the dispatch itself
            logger.error(f"Error in {name}: {type(e).__name__}: {str(e)}")
            text = f"Error: {e}"
        return [types.TextContent(type="text", text=text)]

    return server


async def test_database_connection(context: tools.DatabaseContext) -> bool:
    """Print connection details and the table list.

    Returns:
        True if both could be read, False otherwise
    """
    print()
    print(f"Testing {context.settings.provider} database connection...")

    info = await tools.get_connection_info(context)
    connection_string = context.connection.connection_string
    if connection_string:
        print(info.message.replace(connection_string, sanitize_connection_string(connection_string)))
    else:
        print(info.message)
    print()

    tables = await tools.get_table_schema(context, "")
    print(tables.message)
    print()

    if info.ok and tables.ok:
        print("[PASSED] Test PASSED")
        return True

    print("[FAILED] Test FAILED")
    return False


def parse_args(args: list[str]) -> dict[str, Any]:
    """Parse command line flags.

    Raises:
        ValueError: On unknown flags or missing flag values
    """
    options: dict[str, Any] = {"config_dir": None, "environment": None, "test": False}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--test":
            options["test"] = True
        elif arg in ("--config-dir", "--environment"):
            if i + 1 >= len(args):
                raise ValueError(f"{arg} requires a value")
            options[arg[2:].replace("-", "_")] = args[i + 1]
            i += 1
        else:
            raise ValueError(f"Unknown argument '{arg}'")
        i += 1
    return options


async def main():
    """Parse command line arguments and run the server."""
    try:
        options = parse_args(sys.argv[1:])
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        sys.stderr.write(USAGE)
        sys.exit(EXIT_FAILURE)

    try:
        settings: Settings = load_settings(options["config_dir"], options["environment"])
    except ConfigurationError as e:
        sys.stderr.write(f"Error: {e}\n")
        sys.exit(EXIT_FAILURE)

    configure_logging(settings.log_level)

    # Only a startup connection failure is allowed to stop the process
    try:
        connection = open_connection(settings.provider, dict(settings.connection_strings))
    except (ConnectionError, ImportError, ValueError) as e:
        logger.error(f"Database connection failed: {e}")
        sys.exit(EXIT_FAILURE)

    context = tools.DatabaseContext(connection=connection, settings=settings)

    logger.info("Starting dbgate MCP Server")
    logger.info(f"Provider: {settings.provider}")
    logger.info(f"Allowed commands: {', '.join(settings.allowed_commands) or '(none)'}")
    if settings.restricted_tables:
        logger.info(f"Restricted tables: {', '.join(settings.restricted_tables)}")

    try:
        if options["test"]:
            success = await test_database_connection(context)
            sys.exit(EXIT_SUCCESS if success else EXIT_FAILURE)

        server = create_server(context)
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            init_options = InitializationOptions(
                server_name=SERVER_NAME,
                server_version=SERVER_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            )
            await server.run(
                read_stream,
                write_stream,
                init_options,
            )
    finally:
        connection.close()


def run():
    """Entry point for the dbgate command."""
    import asyncio

    asyncio.run(main())


if __name__ == "__main__":
    run()
