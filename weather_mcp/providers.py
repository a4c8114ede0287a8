"""Provider adapters: one for the National Weather Service, one for Open-Meteo.

Each adapter builds its upstream query, checks the response against the shape
it expects and maps it to the shared ForecastPeriod / AlertSummary records.
Anything that does not match raises ParseError instead of leaking KeyError or
TypeError to the caller.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional
import logging

import httpx

from . import config
from .errors import ParseError, UnsupportedLocationError, UpstreamError
from .formatting import degrees_to_compass, describe_weather_code
from .models import AlertSummary, Coordinates, ForecastPeriod

logger = logging.getLogger("weather_mcp.providers")

_NUMBER = (int, float)


def _field(data: Any, key: str, types: Any, where: str, required: bool = True) -> Any:
    """Read `key` from a JSON object, checking its type."""
    if not isinstance(data, dict):
        raise ParseError(f"{where}: expected a JSON object, got {type(data).__name__}")
    value = data.get(key)
    if value is None:
        if required:
            raise ParseError(f"{where}: missing required field '{key}'")
        return None
    if isinstance(value, bool) or not isinstance(value, types):
        raise ParseError(f"{where}: field '{key}' has unexpected type {type(value).__name__}")
    return value


def _number(value: Any, where: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, _NUMBER):
        raise ParseError(f"{where}: expected a number, got {type(value).__name__}")
    return float(value)


def _error_detail(response: httpx.Response) -> str:
    """Pull the most useful message out of an upstream error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200].strip()
    if isinstance(body, dict):
        for key in ("detail", "reason", "title"):
            if body.get(key):
                return str(body[key])
    return ""


def _point(value: float) -> str:
    # NWS only accepts up to 4 decimals and redirects to the trimmed form
    return f"{value:.4f}".rstrip("0").rstrip(".")


class ForecastProvider(ABC):
    """A weather source that can produce forecast periods for coordinates."""

    display_name = "provider"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = config.HTTP_TIMEOUT):
        self._client = client
        self.timeout = timeout

    @property
    def headers(self) -> dict[str, str]:
        return {}

    @asynccontextmanager
    async def session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Borrow the shared client, or open a short-lived one for this call."""
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
            yield client

    async def fetch_json(self, client: httpx.AsyncClient, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET `url` and decode the JSON body, mapping failures to UpstreamError/ParseError."""
        logger.info(f"[{self.display_name}] GET {url} params={params or {}}")
        try:
            response = await client.get(
                url, params=params, headers=self.headers, timeout=self.timeout, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"[{self.display_name}] timeout for {url}")
            raise UpstreamError(f"{self.display_name} request to {url} timed out after {self.timeout:g}s") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = _error_detail(e.response)
            logger.warning(f"[{self.display_name}] HTTP {status} for {url}: {detail}")
            message = f"{self.display_name} returned HTTP {status} for {url}"
            if detail:
                message += f": {detail}"
            raise UpstreamError(message, status_code=status) from e
        except httpx.HTTPError as e:
            logger.warning(f"[{self.display_name}] request failed for {url}: {e}")
            raise UpstreamError(f"{self.display_name} request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"{self.display_name} returned a body that is not valid JSON from {url}") from e

    @abstractmethod
    async def get_forecast(self, coordinates: Coordinates) -> list[ForecastPeriod]:
        ...


def parse_alerts(data: Any) -> list[AlertSummary]:
    """Map an NWS alert FeatureCollection to AlertSummary records."""
    features = _field(data, "features", list, "NWS alert collection")
    alerts = []
    for i, feature in enumerate(features):
        where = f"NWS alert #{i + 1}"
        props = _field(feature, "properties", dict, where)
        alerts.append(AlertSummary(
            event=_field(props, "event", str, where),
            severity=_field(props, "severity", str, where),
            area=_field(props, "areaDesc", str, where, required=False) or "Unknown",
            headline=_field(props, "headline", str, where, required=False),
            description=_field(props, "description", str, where, required=False),
            instruction=_field(props, "instruction", str, where, required=False),
        ))
    return alerts


def parse_nws_forecast(data: Any) -> list[ForecastPeriod]:
    """Map an NWS gridpoint forecast to ForecastPeriod records, in upstream order."""
    props = _field(data, "properties", dict, "NWS forecast")
    periods = _field(props, "periods", list, "NWS forecast properties")
    result = []
    for i, period in enumerate(periods):
        where = f"NWS forecast period #{i + 1}"
        precipitation = None
        pop = _field(period, "probabilityOfPrecipitation", dict, where, required=False)
        if pop and pop.get("value") is not None:
            precipitation = f"{_number(pop['value'], where):g}% chance"
        result.append(ForecastPeriod(
            name=_field(period, "name", str, where),
            temperature=_number(_field(period, "temperature", _NUMBER, where), where),
            temperature_unit=_field(period, "temperatureUnit", str, where),
            wind_speed=_field(period, "windSpeed", str, where),
            wind_direction=_field(period, "windDirection", str, where, required=False) or "variable",
            short_forecast=_field(period, "shortForecast", str, where),
            detailed_forecast=_field(period, "detailedForecast", str, where, required=False),
            precipitation=precipitation,
        ))
    return result


class NWSProvider(ForecastProvider):
    """Domestic provider backed by api.weather.gov."""

    display_name = "National Weather Service"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = config.HTTP_TIMEOUT,
                 base_url: str = config.NWS_API_BASE, user_agent: str = config.USER_AGENT):
        super().__init__(client, timeout)
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/geo+json"}

    async def get_alerts(self, state: str) -> list[AlertSummary]:
        """Active alerts for a validated two-letter state code."""
        url = f"{self.base_url}/alerts/active/area/{state}"
        async with self.session() as client:
            data = await self.fetch_json(client, url)
        alerts = parse_alerts(data)
        logger.info(f"[NWS] {len(alerts)} active alerts for {state}")
        return alerts

    def _forecast_url(self, points: Any, coordinates: Coordinates) -> str:
        props = _field(points, "properties", dict, "NWS point response")
        url = props.get("forecast")
        if isinstance(url, str) and url:
            return url
        grid_id, grid_x, grid_y = props.get("gridId"), props.get("gridX"), props.get("gridY")
        if grid_id and grid_x is not None and grid_y is not None:
            return f"{self.base_url}/gridpoints/{grid_id}/{grid_x},{grid_y}/forecast"
        raise UnsupportedLocationError(f"NWS point {coordinates} is not mapped to a forecast grid")

    async def get_forecast(self, coordinates: Coordinates) -> list[ForecastPeriod]:
        """Resolve the point to its forecast grid, then fetch that grid's periods."""
        points_url = f"{self.base_url}/points/{_point(coordinates.latitude)},{_point(coordinates.longitude)}"
        async with self.session() as client:
            try:
                points = await self.fetch_json(client, points_url)
            except UpstreamError as e:
                if e.status_code == 404:
                    raise UnsupportedLocationError(
                        f"NWS cannot provide a forecast for {coordinates}; "
                        "the point is outside its coverage area"
                    ) from e
                raise
            forecast_url = self._forecast_url(points, coordinates)
            forecast = await self.fetch_json(client, forecast_url)
        return parse_nws_forecast(forecast)


OPEN_METEO_DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "weather_code",
    "wind_speed_10m_max",
    "wind_direction_10m_dominant",
    "precipitation_sum",
)


def parse_open_meteo_forecast(data: Any, days: int = config.FORECAST_DAYS) -> list[ForecastPeriod]:
    """Map Open-Meteo daily arrays to one ForecastPeriod per day, at most `days` of them."""
    daily = _field(data, "daily", dict, "Open-Meteo response")
    units = _field(data, "daily_units", dict, "Open-Meteo response", required=False) or {}
    timezone = _field(data, "timezone", str, "Open-Meteo response", required=False)
    times = _field(daily, "time", list, "Open-Meteo daily block")
    columns = {name: _field(daily, name, list, "Open-Meteo daily block") for name in OPEN_METEO_DAILY_FIELDS}
    for name, values in columns.items():
        if len(values) != len(times):
            raise ParseError(
                f"Open-Meteo daily block: '{name}' has {len(values)} entries but 'time' has {len(times)}"
            )

    temperature_unit = str(units.get("temperature_2m_max", "°C")).lstrip("°")
    wind_unit = units.get("wind_speed_10m_max", "km/h")
    precipitation_unit = units.get("precipitation_sum", "mm")

    periods = []
    for i, day in enumerate(times[:days]):
        where = f"Open-Meteo day {day}"
        wind_speed = _number(columns["wind_speed_10m_max"][i], where)
        precipitation = _number(columns["precipitation_sum"][i], where)
        code = _number(columns["weather_code"][i], where)
        periods.append(ForecastPeriod(
            name=str(day),
            temperature=_number(columns["temperature_2m_max"][i], where),
            temperature_low=_number(columns["temperature_2m_min"][i], where),
            temperature_unit=temperature_unit,
            wind_speed=f"{wind_speed:.1f} {wind_unit}" if wind_speed is not None else "n/a",
            wind_direction=degrees_to_compass(_number(columns["wind_direction_10m_dominant"][i], where)),
            short_forecast=describe_weather_code(None if code is None else int(code)),
            precipitation=f"{precipitation:.1f} {precipitation_unit}" if precipitation is not None else None,
            timezone=timezone,
        ))
    return periods


class OpenMeteoProvider(ForecastProvider):
    """Global provider backed by the Open-Meteo forecast API."""

    display_name = "Open-Meteo"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = config.HTTP_TIMEOUT,
                 base_url: str = config.OPEN_METEO_API_BASE, days: int = config.FORECAST_DAYS,
                 temperature_unit: str = config.TEMPERATURE_UNIT, wind_speed_unit: str = config.WIND_SPEED_UNIT):
        super().__init__(client, timeout)
        self.base_url = base_url.rstrip("/")
        self.days = days
        self.temperature_unit = temperature_unit
        self.wind_speed_unit = wind_speed_unit

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": config.USER_AGENT}

    def query(self, coordinates: Coordinates) -> dict[str, Any]:
        return {
            "latitude": coordinates.latitude,
            "longitude": coordinates.longitude,
            "daily": ",".join(OPEN_METEO_DAILY_FIELDS),
            "temperature_unit": self.temperature_unit,
            "wind_speed_unit": self.wind_speed_unit,
            "timezone": "auto",
            "forecast_days": self.days,
        }

    async def get_forecast(self, coordinates: Coordinates) -> list[ForecastPeriod]:
        async with self.session() as client:
            data = await self.fetch_json(client, f"{self.base_url}/forecast", params=self.query(coordinates))
        return parse_open_meteo_forecast(data, self.days)
