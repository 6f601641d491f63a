"""Database result serialization for tool responses."""

import base64
import datetime
import decimal
import json
import uuid
from typing import Any, Iterable

JSON_INDENT = 2


def _json_default(value: Any) -> Any:
    """Convert driver value types that json cannot encode natively."""
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, decimal.Decimal):
        # Integral decimals stay integers, the rest keep full precision as text
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime.timedelta):
        return value.total_seconds()
    return str(value)


def to_json(value: Any) -> str:
    """Serialize rows or metadata as indented JSON text."""
    return json.dumps(value, indent=JSON_INDENT, default=_json_default, ensure_ascii=False)


def format_rows(rows: list[dict[str, Any]]) -> str:
    """Serialize result rows (list of column -> value dicts) as indented JSON."""
    return to_json(rows)


def format_table_list(table_names: Iterable[str]) -> str:
    """One table name per line."""
    return "\n".join(str(name) for name in table_names)
