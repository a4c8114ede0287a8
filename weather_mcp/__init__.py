"""Weather MCP server package with lazy server imports.

`weather_mcp.server` is not imported at package import time, so starting the
server with `python -m weather_mcp.server` from another process does not
trigger a runpy `RuntimeWarning`.
"""

from importlib import import_module

from .client import ToolClientError, WeatherToolClient
from .errors import (
    InvalidArgumentError,
    ParseError,
    UnknownToolError,
    UnsupportedLocationError,
    UpstreamError,
    WeatherToolError,
)

__version__ = "0.1.0"

__all__ = [
    "WeatherToolClient",
    "ToolClientError",
    "WeatherToolError",
    "InvalidArgumentError",
    "UnknownToolError",
    "UnsupportedLocationError",
    "UpstreamError",
    "ParseError",
    "get_mcp",
    "get_tool_specs",
    "get_alerts",
    "get_forecast",
    "run_server",
]

# Attributes served from weather_mcp.server, imported on first access
_server_attrs = {
    "get_mcp",
    "get_tool_specs",
    "get_alerts",
    "get_forecast",
    "run_server",
}


def __getattr__(name: str):
    if name in _server_attrs:
        return getattr(import_module(".server", __package__), name)
    raise AttributeError(f"module {__name__} has no attribute {name}")


def __dir__():
    return sorted(list(globals().keys()) + list(_server_attrs))
