"""dbgate - SQL database tools for MCP clients."""

from .constants import SERVER_VERSION

__version__ = SERVER_VERSION
