"""Validate tool calls, route them to a provider and render the result."""

from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional
import logging
import math
import re

from .classifier import BoundingBox, Region, classify, load_regions
from .errors import InvalidArgumentError, UnknownToolError, WeatherToolError
from .formatting import format_alerts, format_forecast
from .models import US_STATE_CODES, Coordinates, ToolRequest, ToolResult
from .providers import ForecastProvider, NWSProvider, OpenMeteoProvider

logger = logging.getLogger("weather_mcp.dispatcher")

STATE_PATTERN = re.compile(r"^[A-Za-z]{2}$")


def _check_argument_names(tool: str, arguments: Mapping[str, Any], expected: set[str]) -> None:
    missing = sorted(expected - set(arguments))
    if missing:
        raise InvalidArgumentError(f"{tool} is missing required argument(s): {', '.join(missing)}")
    unexpected = sorted(set(arguments) - expected)
    if unexpected:
        raise InvalidArgumentError(f"{tool} got unexpected argument(s): {', '.join(unexpected)}")


def validate_state(value: Any) -> str:
    """Return the upper-cased state code, or raise InvalidArgumentError."""
    if not isinstance(value, str) or not STATE_PATTERN.match(value):
        raise InvalidArgumentError(f"state must be a two-letter code like 'CA', got {value!r}")
    code = value.upper()
    if code not in US_STATE_CODES:
        raise InvalidArgumentError(f"'{code}' is not a US state or territory code")
    return code


def _coordinate(name: str, value: Any, limit: float) -> float:
    # bool is an int subclass but never a meaningful coordinate
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidArgumentError(f"{name} must be finite, got {value!r}")
    if not -limit <= number <= limit:
        raise InvalidArgumentError(f"{name} must be between {-limit:g} and {limit:g}, got {number:g}")
    return number


def validate_coordinates(latitude: Any, longitude: Any) -> Coordinates:
    return Coordinates(_coordinate("latitude", latitude, 90.0), _coordinate("longitude", longitude, 180.0))


class WeatherDispatcher:
    """Entry point for tool calls.

    Holds no per-request state: the providers either borrow a shared
    read-only HTTP client or open one per call, so a single dispatcher can
    serve concurrent requests.
    """

    def __init__(self, domestic: Optional[NWSProvider] = None,
                 global_provider: Optional[ForecastProvider] = None,
                 regions: Optional[Iterable[BoundingBox]] = None):
        self.domestic = domestic or NWSProvider()
        self.global_provider = global_provider or OpenMeteoProvider()
        self.regions = tuple(regions) if regions is not None else load_regions()
        self.providers: dict[Region, ForecastProvider] = {
            Region.DOMESTIC: self.domestic,
            Region.GLOBAL: self.global_provider,
        }
        self._handlers: dict[str, Callable[[Mapping[str, Any]], Awaitable[str]]] = {
            "get_alerts": self._get_alerts,
            "get_forecast": self._get_forecast,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, request: ToolRequest) -> ToolResult:
        handler = self._handlers.get(request.name)
        try:
            if handler is None:
                raise UnknownToolError(
                    f"Unknown tool '{request.name}'. Available tools: {', '.join(self._handlers)}"
                )
            text = await handler(request.arguments)
        except WeatherToolError as e:
            logger.warning(f"[dispatch] {request.name} failed: {e.describe()}")
            return ToolResult.failure(e)
        return ToolResult.success(text)

    async def _get_alerts(self, arguments: Mapping[str, Any]) -> str:
        _check_argument_names("get_alerts", arguments, {"state"})
        state = validate_state(arguments["state"])
        logger.info(f"[dispatch] get_alerts state={state}")
        alerts = await self.domestic.get_alerts(state)
        return format_alerts(alerts, state)

    async def _get_forecast(self, arguments: Mapping[str, Any]) -> str:
        _check_argument_names("get_forecast", arguments, {"latitude", "longitude"})
        coordinates = validate_coordinates(arguments["latitude"], arguments["longitude"])
        region = classify(coordinates, self.regions)
        provider = self.providers[region]
        logger.info(f"[dispatch] get_forecast {coordinates} -> {region.value} ({provider.display_name})")
        periods = await provider.get_forecast(coordinates)
        return format_forecast(periods, provider.display_name, coordinates)
