from typing import Optional, Sequence

from .models import AlertSummary, Coordinates, ForecastPeriod

# WMO weather interpretation codes as used by Open-Meteo
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Foggy",
    51: "Drizzle",
    53: "Drizzle",
    55: "Drizzle",
    56: "Freezing drizzle",
    57: "Freezing drizzle",
    61: "Rain",
    63: "Rain",
    65: "Rain",
    66: "Freezing rain",
    67: "Freezing rain",
    71: "Snow",
    73: "Snow",
    75: "Snow",
    77: "Snow grains",
    80: "Rain showers",
    81: "Rain showers",
    82: "Rain showers",
    85: "Snow showers",
    86: "Snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Thunderstorm with hail",
}

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def describe_weather_code(code: Optional[int]) -> str:
    if code is None:
        return "Unknown"
    return WEATHER_CODES.get(int(code), "Unknown")


def degrees_to_compass(degrees: Optional[float]) -> str:
    """Convert a bearing in degrees to a 16-point compass label."""
    if degrees is None:
        return "variable"
    index = int((degrees % 360) / 22.5 + 0.5) % 16
    return COMPASS_POINTS[index]


def _temperature(value: Optional[float], unit: str) -> str:
    if value is None:
        return "n/a"
    if float(value).is_integer():
        return f"{int(value)}°{unit}"
    return f"{value:.1f}°{unit}"


def format_alert(index: int, alert: AlertSummary) -> str:
    """Format one alert into a readable block."""
    lines = [
        f"Alert {index}:",
        f"  Event: {alert.event}",
        f"  Severity: {alert.severity}",
        f"  Area: {alert.area}",
    ]
    if alert.headline:
        lines.append(f"  Headline: {alert.headline}")
    if alert.description:
        lines.append(f"  Description: {alert.description}")
    if alert.instruction:
        lines.append(f"  Instructions: {alert.instruction}")
    return "\n".join(lines)


def format_alerts(alerts: Sequence[AlertSummary], state: str) -> str:
    if not alerts:
        return f"No active weather alerts for {state}."
    blocks = [format_alert(i, alert) for i, alert in enumerate(alerts, start=1)]
    return f"Active Weather Alerts for {state}:\n\n" + "\n\n".join(blocks)


def format_period(period: ForecastPeriod) -> str:
    if period.temperature_low is not None:
        temperature = (f"{_temperature(period.temperature_low, period.temperature_unit)} - "
                       f"{_temperature(period.temperature, period.temperature_unit)}")
    else:
        temperature = _temperature(period.temperature, period.temperature_unit)
    lines = [
        f"{period.name}:",
        f"  Temperature: {temperature}",
        f"  Wind: {period.wind_speed} {period.wind_direction}",
        f"  Conditions: {period.short_forecast}",
    ]
    if period.precipitation:
        lines.append(f"  Precipitation: {period.precipitation}")
    if period.detailed_forecast:
        lines.append(f"  Details: {period.detailed_forecast}")
    return "\n".join(lines)


def format_forecast(periods: Sequence[ForecastPeriod], source: str, coordinates: Coordinates) -> str:
    """Render forecast periods as text, or a no-data message when there are none."""
    if not periods:
        return f"No forecast data available for {coordinates}."
    header = f"Weather Forecast ({source})\nLocation: {coordinates}"
    if periods[0].timezone:
        header += f"\nTimezone: {periods[0].timezone}"
    return header + "\n\n" + "\n\n".join(format_period(p) for p in periods)
