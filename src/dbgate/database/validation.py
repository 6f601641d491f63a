"""Command allow-list and restricted table enforcement."""

from typing import Iterable, Optional


def validate_allowed_command(query: str, allowed_commands: Iterable[str]) -> tuple[bool, Optional[str]]:
    """Check that a query starts with one of the allowed command prefixes.

    The comparison is a case-insensitive prefix match on the
    whitespace-trimmed text, so an allow-list of ["SELECT"] accepts
    "  select * from users" and rejects "DELETE FROM users". An empty
    allow-list rejects everything.

    Table names embedded in the query text are not checked here.

    Args:
        query: SQL text as received from the client
        allowed_commands: Allowed leading command prefixes (e.g. SELECT, WITH)

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if the query starts with an allowed command
        - (False, error_message) otherwise
    """
    allowed_commands = tuple(allowed_commands)
    query = query or ""
    normalized_query = query.strip().casefold()

    for command in allowed_commands:
        if normalized_query.startswith(command.casefold()):
            return True, None

    return False, (
        "Command not in allowed list\n"
        f"  Allowed commands: {', '.join(allowed_commands) or '(none)'}\n"
        f"  Query: {query[:100]}{'...' if len(query) > 100 else ''}"
    )


def is_restricted_table(table_name: str, restricted_tables: Iterable[str]) -> bool:
    """Exact, case-insensitive match of a table name against the deny-list."""
    name = table_name.casefold()
    return any(name == restricted.casefold() for restricted in restricted_tables)


def validate_table_access(table_name: str, restricted_tables: Iterable[str]) -> tuple[bool, Optional[str]]:
    """Check that a discrete table name is not on the restricted list.

    Args:
        table_name: Table name passed as its own argument
        restricted_tables: Restricted table names

    Returns:
        Tuple of (is_valid, error_message)
    """
    if is_restricted_table(table_name, restricted_tables):
        return False, f"Table '{table_name}' is restricted"
    return True, None


def is_select_statement(command: str) -> bool:
    """True if the trimmed command text starts with SELECT (any casing)."""
    return (command or "").strip().upper().startswith("SELECT")
