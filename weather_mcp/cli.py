#!/usr/bin/env python3
"""
weather-mcp command line: run the server, list its tools, or call one.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .client import ToolClientError, WeatherToolClient


def parse_tool_arguments(pairs: List[str]) -> Dict[str, Any]:
    """Turn `key=value` pairs into tool arguments; values are JSON when they parse."""
    arguments: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            arguments[key] = json.loads(raw)
        except json.JSONDecodeError:
            arguments[key] = raw
    return arguments


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weather-mcp", description="Weather alerts and forecasts over MCP")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the MCP server")
    serve.add_argument("--transport", default="stdio", choices=["stdio", "sse", "streamable-http"])

    tools = sub.add_parser("tools", help="Print the advertised tool specs")
    tools.add_argument("--output", help="Write the specs to this JSON file instead of stdout")

    call = sub.add_parser("call", help="Start the server over stdio and call one tool")
    call.add_argument("tool", help="Tool name, e.g. get_forecast")
    call.add_argument("arguments", nargs="*", help="Tool arguments as key=value")
    call.add_argument("--timeout", type=float, default=60.0)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from . import config
        from .server import run_server
        config.configure_logging("weather_server.log")
        run_server(args.transport)
        return 0

    if args.command == "tools":
        from .server import export_tools_json, get_tool_specs
        if args.output:
            export_tools_json(args.output)
            print(f"Wrote tool specs to {args.output}")
        else:
            print(json.dumps(get_tool_specs(), indent=2))
        return 0

    try:
        arguments = parse_tool_arguments(args.arguments)
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    try:
        with WeatherToolClient(timeout=args.timeout) as client:
            print(client.call_tool(args.tool, arguments))
    except ToolClientError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
