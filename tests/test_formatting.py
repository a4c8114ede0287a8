import pytest

from weather_mcp.formatting import (
    degrees_to_compass,
    describe_weather_code,
    format_alerts,
    format_forecast,
)
from weather_mcp.models import AlertSummary, Coordinates, ForecastPeriod

HERE = Coordinates(52.52, 13.41)


def test_empty_forecast_renders_no_data_text():
    text = format_forecast([], "Open-Meteo", HERE)
    assert text == "No forecast data available for 52.5200, 13.4100."


def test_empty_alerts_render_message():
    assert format_alerts([], "TX") == "No active weather alerts for TX."


def test_forecast_field_order():
    period = ForecastPeriod(
        name="Tonight",
        temperature=58,
        temperature_unit="F",
        wind_speed="5 mph",
        wind_direction="SW",
        short_forecast="Clear",
        detailed_forecast="Clear, with a low around 58.",
        precipitation="10% chance",
    )
    text = format_forecast([period], "National Weather Service", Coordinates(40.7128, -74.006))
    assert text.splitlines()[:2] == [
        "Weather Forecast (National Weather Service)",
        "Location: 40.7128, -74.0060",
    ]
    block = text.split("\n\n")[1].splitlines()
    assert block == [
        "Tonight:",
        "  Temperature: 58°F",
        "  Wind: 5 mph SW",
        "  Conditions: Clear",
        "  Precipitation: 10% chance",
        "  Details: Clear, with a low around 58.",
    ]


def test_forecast_with_range():
    period = ForecastPeriod(
        name="2026-10-16",
        temperature=14.2,
        temperature_low=6.0,
        temperature_unit="C",
        wind_speed="18.4 km/h",
        wind_direction="W",
        short_forecast="Overcast",
    )
    text = format_forecast([period], "Open-Meteo", HERE)
    assert "  Temperature: 6°C - 14.2°C" in text
    assert "Details" not in text


def test_alert_blocks():
    alerts = [
        AlertSummary(event="Heat Advisory", severity="Moderate", area="Travis", headline="Heat Advisory until 8 PM"),
        AlertSummary(event="Flash Flood Warning", severity="Severe", area="Hays", instruction="Move to higher ground."),
    ]
    text = format_alerts(alerts, "TX")
    assert text.startswith("Active Weather Alerts for TX:")
    assert "Alert 1:\n  Event: Heat Advisory\n  Severity: Moderate\n  Area: Travis\n  Headline: Heat Advisory until 8 PM" in text
    assert "Alert 2:" in text
    assert "  Instructions: Move to higher ground." in text
    assert text.count("Description") == 0


@pytest.mark.parametrize("code, text", [
    (0, "Clear sky"),
    (45, "Foggy"),
    (63, "Rain"),
    (86, "Snow showers"),
    (99, "Thunderstorm with hail"),
    (42, "Unknown"),
    (None, "Unknown"),
])
def test_weather_codes(code, text):
    assert describe_weather_code(code) == text


@pytest.mark.parametrize("degrees, label", [
    (0, "N"),
    (11.2, "N"),
    (11.3, "NNE"),
    (90, "E"),
    (200, "SSW"),
    (359, "N"),
    (720, "N"),
    (None, "variable"),
])
def test_compass(degrees, label):
    assert degrees_to_compass(degrees) == label


def test_forecast_header_includes_timezone():
    period = ForecastPeriod(
        name="2026-10-16",
        temperature=14.2,
        temperature_unit="C",
        wind_speed="18.4 km/h",
        wind_direction="W",
        short_forecast="Overcast",
        timezone="Europe/Berlin",
    )
    lines = format_forecast([period], "Open-Meteo", HERE).splitlines()
    assert lines[:3] == [
        "Weather Forecast (Open-Meteo)",
        "Location: 52.5200, 13.4100",
        "Timezone: Europe/Berlin",
    ]
