"""Tool descriptions and input schemas for the dbgate MCP server."""

from .settings import Settings


class ToolDescriptions:
    """Centralized management of tool names, descriptions and schemas."""

    EXECUTE_QUERY = "ExecuteQuery"
    GET_TABLE_SCHEMA = "GetTableSchema"
    EXECUTE_NON_QUERY = "ExecuteNonQuery"
    BACKUP_TABLE = "BackupTable"
    GET_CONNECTION_INFO = "GetConnectionInfo"

    PARAMETERS_DESCRIPTION = (
        "Optional parameters for the statement (JSON object). "
        'Reference them as @name in the SQL, e.g. {"id": 42} with "... WHERE id = @id".'
    )

    @classmethod
    def get_execute_query_description(cls, settings: Settings) -> str:
        """Describe ExecuteQuery, including the configured limits."""
        allowed = ", ".join(settings.allowed_commands) or "none configured"
        return (
            "Execute a SQL SELECT query on the database and return results.\n"
            f"Allowed commands: {allowed}\n"
            f"Results are limited to {settings.query_execution_limit} rows "
            f"and the query times out after {settings.command_timeout}s."
        )

    @classmethod
    def get_table_schema_description(cls) -> str:
        return "Get information about database tables and their structure."

    @classmethod
    def get_execute_non_query_description(cls) -> str:
        return "Execute a SQL command (INSERT, UPDATE, DELETE) on the database."

    @classmethod
    def get_backup_table_description(cls) -> str:
        return "Create a backup of a table or entire database."

    @classmethod
    def get_connection_info_description(cls) -> str:
        return "Get database connection information and status."

    @classmethod
    def get_tool_schemas(cls, settings: Settings) -> list[dict]:
        """Name, description and JSON input schema for every tool."""
        return [
            {
                "name": cls.EXECUTE_QUERY,
                "description": cls.get_execute_query_description(settings),
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "The SQL SELECT query to execute.",
                        },
                        "parameters": {
                            "type": "string",
                            "description": cls.PARAMETERS_DESCRIPTION,
                            "default": "{}",
                        },
                    },
                    "required": ["query"],
                },
            },
            {
                "name": cls.GET_TABLE_SCHEMA,
                "description": cls.get_table_schema_description(),
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "tableName": {
                            "type": "string",
                            "description": "Name of the table to inspect. Leave empty to list all tables.",
                        },
                    },
                },
            },
            {
                "name": cls.EXECUTE_NON_QUERY,
                "description": cls.get_execute_non_query_description(),
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "command": {
                            "type": "string",
                            "description": "The SQL command to execute (INSERT, UPDATE, DELETE).",
                        },
                        "parameters": {
                            "type": "string",
                            "description": cls.PARAMETERS_DESCRIPTION,
                            "default": "{}",
                        },
                    },
                    "required": ["command"],
                },
            },
            {
                "name": cls.BACKUP_TABLE,
                "description": cls.get_backup_table_description(),
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "tableName": {
                            "type": "string",
                            "description": "Name of the table to backup.",
                        },
                        "backupPath": {
                            "type": "string",
                            "description": "Path where to save the backup file.",
                        },
                    },
                    "required": ["tableName", "backupPath"],
                },
            },
            {
                "name": cls.GET_CONNECTION_INFO,
                "description": cls.get_connection_info_description(),
                "inputSchema": {"type": "object", "properties": {}},
            },
        ]
