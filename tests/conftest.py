import httpx
import pytest


@pytest.fixture
def mock_client():
    """Factory for AsyncClients whose requests are answered by `handler(request)`."""
    def build(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return build


@pytest.fixture
def points_response():
    return {
        "properties": {
            "gridId": "OKX",
            "gridX": 33,
            "gridY": 35,
            "forecast": "https://api.weather.gov/gridpoints/OKX/33,35/forecast",
        }
    }


@pytest.fixture
def nws_forecast_response():
    return {
        "properties": {
            "periods": [
                {
                    "number": 1,
                    "name": "Tonight",
                    "temperature": 58,
                    "temperatureUnit": "F",
                    "probabilityOfPrecipitation": {"unitCode": "wmoUnit:percent", "value": 20},
                    "windSpeed": "5 to 10 mph",
                    "windDirection": "SW",
                    "shortForecast": "Partly Cloudy",
                    "detailedForecast": "Partly cloudy, with a low around 58.",
                },
                {
                    "number": 2,
                    "name": "Saturday",
                    "temperature": 71,
                    "temperatureUnit": "F",
                    "probabilityOfPrecipitation": {"unitCode": "wmoUnit:percent", "value": None},
                    "windSpeed": "10 mph",
                    "windDirection": "W",
                    "shortForecast": "Sunny",
                    "detailedForecast": "Sunny, with a high near 71.",
                },
            ]
        }
    }


@pytest.fixture
def alerts_response():
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "properties": {
                    "event": "Red Flag Warning",
                    "severity": "Severe",
                    "areaDesc": "Santa Lucia Mountains",
                    "headline": "Red Flag Warning issued October 16",
                    "description": "Gusty winds and low humidity.",
                    "instruction": "Avoid outdoor burning.",
                }
            },
            {
                "properties": {
                    "event": "Wind Advisory",
                    "severity": "Moderate",
                    "areaDesc": "Los Angeles County",
                    "headline": None,
                    "description": None,
                    "instruction": None,
                }
            },
        ],
    }


@pytest.fixture
def open_meteo_response():
    return {
        "latitude": 52.52,
        "longitude": 13.419998,
        "timezone": "Europe/Berlin",
        "daily_units": {
            "time": "iso8601",
            "temperature_2m_max": "°C",
            "temperature_2m_min": "°C",
            "weather_code": "wmo code",
            "wind_speed_10m_max": "km/h",
            "wind_direction_10m_dominant": "°",
            "precipitation_sum": "mm",
        },
        "daily": {
            "time": ["2026-10-16", "2026-10-17", "2026-10-18"],
            "temperature_2m_max": [14.2, 12.0, 11.5],
            "temperature_2m_min": [6.1, 5.4, 4.0],
            "weather_code": [3, 61, 95],
            "wind_speed_10m_max": [18.4, 22.0, 30.1],
            "wind_direction_10m_dominant": [270, 225, 10],
            "precipitation_sum": [0.0, 4.2, 11.3],
        },
    }
