"""Named parameter decoding and driver-specific placeholder binding.

Statements sent by clients (and the catalog queries in ``providers.py``)
use ``@name`` placeholders. Each driver expects a different placeholder
format and parameter container:

    - :name      + dict   (sqlite3)
    - %(name)s   + dict   (psycopg2, pymysql)
    - ?          + tuple  (pyodbc)

Only ``@name`` tokens whose name was supplied are rewritten. Other ``@``
tokens (T-SQL local variables, MySQL user variables, ``@@VERSION``) and
anything inside quoted literals are left untouched.
"""

import json
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Union

_TOKEN_PATTERN = re.compile(
    r"'(?:[^']|'')*'"  # string literal
    r'|"(?:[^"]|"")*"'  # quoted identifier
    r"|@@\w+"  # server variable
    r"|@([A-Za-z_]\w*)"  # named placeholder
)

PARAMETER_PREFIXES = ("@", ":", "?")


class ParamStyle(Enum):
    """Placeholder format expected by a driver."""

    NAMED = "named"
    PYFORMAT = "pyformat"
    QMARK = "qmark"


def parse_parameters(parameters: Union[str, Mapping[str, Any], None]) -> dict[str, Any]:
    """Decode the optional JSON parameter object sent with a statement.

    Args:
        parameters: JSON object text (e.g. '{"id": 42}'), an already decoded
            mapping, or None

    Returns:
        Dictionary of parameter name to value (empty if none were supplied)

    Raises:
        json.JSONDecodeError: If the text is not valid JSON
        ValueError: If the JSON value is not an object
    """
    if parameters is None:
        return {}
    if isinstance(parameters, Mapping):
        return dict(parameters)

    text = parameters.strip()
    if not text or text == "{}":
        return {}

    decoded = json.loads(text)
    if not isinstance(decoded, dict):
        raise ValueError(
            f"Parameters must be a JSON object, got {type(decoded).__name__}\n"
            '  Example: {"id": 42, "status": "active"}'
        )
    return decoded


def normalize_parameter_name(name: str) -> str:
    """Drop one leading placeholder prefix, so "@id", ":id" and "?id" bind as "id"."""
    if name[:1] in PARAMETER_PREFIXES:
        return name[1:]
    return name


def bind_parameters(
    sql: str,
    parameters: Optional[Mapping[str, Any]],
    style: ParamStyle,
) -> tuple[str, Union[dict[str, Any], tuple[Any, ...], None]]:
    """Rewrite @name placeholders into the driver's native style.

    Supplied names may carry one leading ``@``, ``:`` or ``?``. Names match
    exactly first, then case-insensitively.

    Args:
        sql: Statement using @name placeholders
        parameters: Parameter values by name (None or empty for no binding)
        style: Target driver placeholder style

    Returns:
        Tuple of (statement, args) where args is None when nothing is bound
    """
    if not parameters:
        return sql, None

    parameters = {normalize_parameter_name(name): value for name, value in parameters.items()}
    by_folded_name = {name.casefold(): name for name in parameters}
    positional: list[Any] = []

    def _lookup(name: str) -> Optional[str]:
        if name in parameters:
            return name
        return by_folded_name.get(name.casefold())

    def _replace(match: re.Match) -> str:
        placeholder = match.group(1)
        if placeholder is None:
            return match.group(0)

        key = _lookup(placeholder)
        if key is None:
            return match.group(0)

        if style is ParamStyle.QMARK:
            positional.append(parameters[key])
            return "?"
        if style is ParamStyle.PYFORMAT:
            return f"%({key})s"
        return f":{key}"

    if style is ParamStyle.PYFORMAT:
        # Literal percent signs must be escaped once arguments are passed
        sql = sql.replace("%", "%%")

    statement = _TOKEN_PATTERN.sub(_replace, sql)

    if style is ParamStyle.QMARK:
        return statement, tuple(positional)
    return statement, dict(parameters)
