from typing import Annotated, Any
import json
import logging

from pydantic import Field

from . import config
from .dispatcher import STATE_PATTERN, WeatherDispatcher
from .models import ToolRequest

logger = logging.getLogger("weather_mcp.server")

SERVER_NAME = "weather-mcp"
INSTRUCTIONS = (
    "Weather alerts for US states and forecasts for any coordinates. "
    "US locations are served by the National Weather Service, everything else by Open-Meteo."
)

# Tool metadata exported for clients (server-first source of truth)
_TOOL_SPECS: list[dict] = []
# Decorated functions waiting for the FastMCP instance; `mcp` is only imported
# once the server actually starts.
_REGISTERED_FUNCS: list[tuple] = []
_registered = False

mcp = None
_dispatcher: WeatherDispatcher | None = None


def _build_mcp():
    from mcp.server.fastmcp import FastMCP
    from mcp.types import TextContent, Tool

    class WeatherMCP(FastMCP):
        """FastMCP that advertises the recorded tool schemas and hands raw
        arguments to the dispatcher, so every malformed call is reported as
        InvalidArgument instead of a pydantic validation message."""

        async def list_tools(self) -> list[Tool]:
            return [
                Tool(name=s["name"], description=s["description"], inputSchema=s["input_schema"])
                for s in get_tool_specs()
            ]

        async def call_tool(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
            text = await run_tool(name, arguments or {})
            return [TextContent(type="text", text=text)]

    return WeatherMCP(SERVER_NAME, instructions=INSTRUCTIONS)


def get_mcp():
    """Lazily create and return the FastMCP server instance."""
    global mcp
    if mcp is None:
        mcp = _build_mcp()
    return mcp


def get_dispatcher() -> WeatherDispatcher:
    """Shared dispatcher; it holds configuration only, never request state."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = WeatherDispatcher()
    return _dispatcher


def register_tools_with_mcp():
    """Hand every @tool function to FastMCP. Safe to call more than once."""
    global _registered
    if _registered:
        return get_mcp()
    m = get_mcp()
    for fn, args, kwargs in _REGISTERED_FUNCS:
        m.tool(*args, **kwargs)(fn)
    _registered = True
    return m


def tool(*args, schema: dict | None = None, **kwargs):
    """Record a tool's metadata without touching FastMCP.

    Use as `@tool(schema={...})`; registration happens in
    `register_tools_with_mcp()`. The schema is what clients see in
    tools/list.
    """
    def decorator(fn):
        spec = {
            "name": kwargs.get("name") or fn.__name__,
            "description": (fn.__doc__ or "").strip(),
            "input_schema": schema or {},
        }
        _TOOL_SPECS.append(spec)
        _REGISTERED_FUNCS.append((fn, args, kwargs))
        fn.__tool_spec__ = spec
        return fn
    return decorator


def get_tool_specs() -> list[dict]:
    """Return copies of the registered tool specs."""
    return [json.loads(json.dumps(s)) for s in _TOOL_SPECS]


def export_tools_json(path: str = "tools.json") -> None:
    """Write the tool specs to a JSON file."""
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(get_tool_specs(), fh, indent=2)


async def run_tool(name: str, arguments: dict[str, Any]) -> str:
    """Dispatch one call and surface failures as MCP tool errors."""
    result = await get_dispatcher().dispatch(ToolRequest(name, arguments))
    if not result.ok:
        from mcp.server.fastmcp.exceptions import ToolError
        raise ToolError(result.describe_error())
    return result.text


@tool(schema={
    "type": "object",
    "properties": {
        "state": {
            "type": "string",
            "pattern": STATE_PATTERN.pattern,
            "description": "Two-letter US state or territory code (e.g., CA, NY, TX)",
        }
    },
    "required": ["state"],
    "additionalProperties": False,
})
async def get_alerts(
    state: Annotated[str, Field(pattern=STATE_PATTERN.pattern, description="Two-letter US state code")],
) -> str:
    """Get active weather alerts for a US state or territory.

    Args:
        state: Two-letter US state code (e.g. CA, NY)
    """
    return await run_tool("get_alerts", {"state": state})


@tool(schema={
    "type": "object",
    "properties": {
        "latitude": {"type": "number", "minimum": -90, "maximum": 90, "description": "Latitude of the location"},
        "longitude": {"type": "number", "minimum": -180, "maximum": 180, "description": "Longitude of the location"},
    },
    "required": ["latitude", "longitude"],
    "additionalProperties": False,
})
async def get_forecast(
    latitude: Annotated[float, Field(ge=-90, le=90, description="Latitude of the location")],
    longitude: Annotated[float, Field(ge=-180, le=180, description="Longitude of the location")],
) -> str:
    """Get the weather forecast for any location worldwide.

    US locations use the National Weather Service, all others use Open-Meteo
    (e.g. 40.7128, -74.0060 for New York or 52.52, 13.41 for Berlin).

    Args:
        latitude: Latitude of the location
        longitude: Longitude of the location
    """
    return await run_tool("get_forecast", {"latitude": latitude, "longitude": longitude})


def run_server(transport: str = "stdio") -> None:
    """Register the tools and run the MCP server."""
    m = register_tools_with_mcp()
    logger.info(f"Starting {SERVER_NAME} over {transport}")
    m.run(transport=transport)


def main() -> None:
    path = config.configure_logging("weather_server.log")
    logger.info(f"Logging to {path}")
    run_server()


if __name__ == "__main__":
    main()
