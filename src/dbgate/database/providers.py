"""Database provider selection and dialect-specific catalog SQL."""

from dataclasses import dataclass
from enum import Enum


class Provider(Enum):
    """Supported database engines."""

    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"

    @classmethod
    def from_name(cls, name: str) -> "Provider":
        """Resolve a configured provider name, falling back to SQLite.

        Args:
            name: Provider name in any casing (e.g. "SQLite", "PostgreSQL")

        Returns:
            Matching Provider, or Provider.SQLITE for unknown names
        """
        normalized = (name or "").strip().lower()
        for provider in cls:
            if provider.value == normalized:
                return provider
        return cls.SQLITE


@dataclass(frozen=True)
class DialectProfile:
    """SQL fragments and connection string name for one provider."""

    provider: Provider
    list_tables_sql: str
    describe_table_sql: str
    connection_string_name: str


DIALECTS = {
    Provider.SQLITE: DialectProfile(
        provider=Provider.SQLITE,
        list_tables_sql="SELECT name FROM sqlite_master WHERE type='table' ORDER BY name",
        # Table-valued pragma so the table name can be bound like any other parameter
        describe_table_sql="SELECT * FROM pragma_table_info(@tableName)",
        connection_string_name="DefaultConnection",
    ),
    Provider.SQLSERVER: DialectProfile(
        provider=Provider.SQLSERVER,
        list_tables_sql=(
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_TYPE = 'BASE TABLE' ORDER BY TABLE_NAME"
        ),
        describe_table_sql=(
            "SELECT COLUMN_NAME, DATA_TYPE, IS_NULLABLE, COLUMN_DEFAULT "
            "FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_NAME = @tableName ORDER BY ORDINAL_POSITION"
        ),
        connection_string_name="SqlServerConnection",
    ),
    Provider.POSTGRESQL: DialectProfile(
        provider=Provider.POSTGRESQL,
        list_tables_sql=(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = 'public' ORDER BY table_name"
        ),
        describe_table_sql=(
            "SELECT column_name, data_type, is_nullable, column_default "
            "FROM information_schema.columns "
            "WHERE table_name = @tableName ORDER BY ordinal_position"
        ),
        connection_string_name="PostgreSqlConnection",
    ),
    Provider.MYSQL: DialectProfile(
        provider=Provider.MYSQL,
        list_tables_sql=(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = DATABASE() ORDER BY table_name"
        ),
        describe_table_sql=(
            "SELECT COLUMN_NAME, DATA_TYPE, IS_NULLABLE, COLUMN_DEFAULT "
            "FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_NAME = @tableName ORDER BY ORDINAL_POSITION"
        ),
        connection_string_name="MySqlConnection",
    ),
}


def select_dialect(provider_name: str) -> DialectProfile:
    """Return the dialect profile for a configured provider name.

    Unknown names resolve to the SQLite profile, so this never fails.
    """
    return DIALECTS[Provider.from_name(provider_name)]
