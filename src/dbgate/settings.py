"""Configuration loading for the dbgate server.

Settings are read from, in order (later sources win):

1. ``appsettings.json`` in the configuration directory (required)
2. ``appsettings.<Environment>.json`` (optional)
3. Environment variables, using ``__`` as the section separator,
   e.g. ``DatabaseSettings__Provider=PostgreSQL`` or
   ``Security__AllowedCommands__0=SELECT``

Every source is flattened to ``Section:Key[:index]`` keys and looked up
case-insensitively, so a later source can override a single value or a
single list element.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_ENVIRONMENT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PROVIDER,
    DEFAULT_QUERY_EXECUTION_LIMIT,
    ENVIRONMENT_SETTINGS_FILE,
    ENVIRONMENT_VARIABLE,
    SETTINGS_FILE,
)

SECTION_SEPARATOR = ":"
ENV_SECTION_SEPARATOR = "__"


class ConfigurationError(Exception):
    """Raised when configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    """Immutable configuration snapshot read by every tool call."""

    provider: str = DEFAULT_PROVIDER
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT
    query_execution_limit: int = DEFAULT_QUERY_EXECUTION_LIMIT
    allowed_commands: tuple[str, ...] = ()
    restricted_tables: tuple[str, ...] = ()
    connection_strings: Mapping[str, str] = field(default_factory=dict)
    log_level: str = DEFAULT_LOG_LEVEL


def flatten(value: Any, prefix: str = "") -> dict[str, str]:
    """Flatten nested JSON into lower-cased ``a:b:0`` keys with string values."""
    flat: dict[str, str] = {}
    if isinstance(value, dict):
        items = value.items()
    elif isinstance(value, list):
        items = ((str(index), item) for index, item in enumerate(value))
    else:
        if prefix:
            flat[prefix] = "" if value is None else _scalar_to_str(value)
        return flat

    for key, item in items:
        path = f"{prefix}{SECTION_SEPARATOR}{key}" if prefix else str(key)
        flat.update(flatten(item, path.lower()))
    return flat


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ConfigurationView:
    """Case-insensitive lookups over flattened configuration keys."""

    def __init__(self, values: Mapping[str, str]):
        self.values = {key.lower(): value for key, value in values.items()}

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key.lower(), default)

    def get_int(self, key: str, default: int) -> int:
        raw = self.get(key)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid integer for {key}: '{raw}'\n"
                f"  Hint: Use a whole number, e.g. {default}"
            ) from e

    def get_list(self, key: str) -> tuple[str, ...]:
        """Return the elements stored under ``key:0``, ``key:1``... in index order."""
        prefix = key.lower() + SECTION_SEPARATOR
        indexed = []
        for name, value in self.values.items():
            if name.startswith(prefix):
                index = name[len(prefix):]
                if index.isdigit():
                    indexed.append((int(index), value))
        return tuple(value for _, value in sorted(indexed))

    def get_section(self, key: str) -> dict[str, str]:
        """Return the direct scalar children of a section, keyed by child name."""
        prefix = key.lower() + SECTION_SEPARATOR
        return {
            name[len(prefix):]: value
            for name, value in self.values.items()
            if name.startswith(prefix) and SECTION_SEPARATOR not in name[len(prefix):]
        }


def read_json_file(path: Path) -> dict[str, str]:
    """Read and flatten one JSON settings file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    return flatten(data)


def read_environment(environ: Mapping[str, str]) -> dict[str, str]:
    """Convert ``Section__Key`` environment variables into flattened keys."""
    return {
        name.replace(ENV_SECTION_SEPARATOR, SECTION_SEPARATOR).lower(): value
        for name, value in environ.items()
        if ENV_SECTION_SEPARATOR in name
    }


def load_configuration(
    config_dir: Optional[str] = None,
    environment: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConfigurationView:
    """Layer settings files and environment variables into one view.

    Args:
        config_dir: Directory holding appsettings.json (default: current directory)
        environment: Environment name selecting appsettings.<name>.json
        environ: Environment variables (default: os.environ)

    Returns:
        ConfigurationView over the merged values

    Raises:
        ConfigurationError: If appsettings.json is missing or unreadable
    """
    environ = os.environ if environ is None else environ
    base = Path(config_dir) if config_dir else Path.cwd()
    environment = environment or environ.get(ENVIRONMENT_VARIABLE) or DEFAULT_ENVIRONMENT

    settings_path = base / SETTINGS_FILE
    if not settings_path.is_file():
        raise ConfigurationError(
            f"Settings file not found: {settings_path}\n"
            f"  Hint: Create {SETTINGS_FILE} or pass --config-dir <directory>"
        )

    values = read_json_file(settings_path)

    environment_path = base / ENVIRONMENT_SETTINGS_FILE.format(environment=environment)
    if environment_path.is_file():
        values.update(read_json_file(environment_path))

    values.update(read_environment(environ))
    return ConfigurationView(values)


def settings_from_configuration(config: ConfigurationView) -> Settings:
    """Build the typed settings snapshot from a configuration view."""
    return Settings(
        provider=config.get("DatabaseSettings:Provider") or DEFAULT_PROVIDER,
        command_timeout=config.get_int("DatabaseSettings:CommandTimeout", DEFAULT_COMMAND_TIMEOUT),
        query_execution_limit=config.get_int(
            "DatabaseSettings:QueryExecutionLimit", DEFAULT_QUERY_EXECUTION_LIMIT
        ),
        allowed_commands=config.get_list("Security:AllowedCommands"),
        restricted_tables=config.get_list("Security:RestrictedTables"),
        connection_strings=config.get_section("ConnectionStrings"),
        log_level=config.get("Logging:LogLevel:Default") or DEFAULT_LOG_LEVEL,
    )


def load_settings(
    config_dir: Optional[str] = None,
    environment: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load the configuration snapshot used by the server."""
    return settings_from_configuration(load_configuration(config_dir, environment, environ))
