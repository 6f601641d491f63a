"""Constants and static configuration for the dbgate MCP server."""

# Application constants
SERVER_NAME = "dbgate"
SERVER_VERSION = "1.0.0"
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

# Configuration files
SETTINGS_FILE = "appsettings.json"
ENVIRONMENT_SETTINGS_FILE = "appsettings.{environment}.json"
ENVIRONMENT_VARIABLE = "DBGATE_ENVIRONMENT"
DEFAULT_ENVIRONMENT = "Production"

# Database defaults
DEFAULT_PROVIDER = "SQLite"
DEFAULT_COMMAND_TIMEOUT = 30  # seconds
DEFAULT_QUERY_EXECUTION_LIMIT = 1000  # rows
DEFAULT_CONNECTION_TIMEOUT = 15  # seconds, ADO.NET default
DEFAULT_LOG_LEVEL = "Information"

# Tool response messages
MSG_QUERY_BLOCKED = "Query blocked: Command not allowed."
MSG_NO_RESULTS = "No results found."
MSG_QUERY_SUCCESS = "Query executed successfully. Results:\n{results}"
MSG_QUERY_FAILED = "Query execution failed: {error}"
MSG_TABLE_LIST = "Available tables:\n{tables}"
MSG_TABLE_RESTRICTED = "Access denied: Table is restricted."
MSG_TABLE_SCHEMA = "Schema for table '{table}':\n{schema}"
MSG_SCHEMA_FAILED = "Schema retrieval failed: {error}"
MSG_USE_EXECUTE_QUERY = "Use ExecuteQuery for SELECT statements."
MSG_COMMAND_SUCCESS = "Command executed successfully. {count} row(s) affected."
MSG_COMMAND_FAILED = "Command execution failed: {error}"
MSG_BACKUP_SUCCESS = "Table '{table}' backed up successfully to '{path}'"
MSG_BACKUP_FAILED = "Backup failed: {error}"
MSG_CONNECTION_INFO = "Database connection info:\n{info}"
MSG_CONNECTION_INFO_FAILED = "Failed to get connection info: {error}"
