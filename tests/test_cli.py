import json

import pytest

from weather_mcp import cli
from weather_mcp.client import ToolClientError


class FakeClient:
    calls = []
    error = None

    def __init__(self, timeout=60.0):
        self.timeout = timeout

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def call_tool(self, name, arguments):
        FakeClient.calls.append((name, arguments))
        if FakeClient.error:
            raise FakeClient.error
        return "Weather Forecast (Open-Meteo)"


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.calls = []
    FakeClient.error = None
    monkeypatch.setattr(cli, "WeatherToolClient", FakeClient)
    return FakeClient


def test_parse_tool_arguments():
    assert cli.parse_tool_arguments(["latitude=52.52", "longitude=13.41", "state=CA"]) == {
        "latitude": 52.52,
        "longitude": 13.41,
        "state": "CA",
    }


def test_parse_tool_arguments_rejects_bare_values():
    with pytest.raises(ValueError):
        cli.parse_tool_arguments(["52.52"])


def test_tools_command(capsys):
    assert cli.main(["tools"]) == 0
    specs = json.loads(capsys.readouterr().out)
    assert [s["name"] for s in specs] == ["get_alerts", "get_forecast"]


def test_call_command(fake_client, capsys):
    assert cli.main(["call", "get_forecast", "latitude=52.52", "longitude=13.41"]) == 0
    assert fake_client.calls == [("get_forecast", {"latitude": 52.52, "longitude": 13.41})]
    assert "Open-Meteo" in capsys.readouterr().out


def test_call_command_tool_error(fake_client, capsys):
    fake_client.error = ToolClientError("UnknownTool: Unknown tool 'get_weather_xyz'")
    assert cli.main(["call", "get_weather_xyz"]) == 1
    assert "UnknownTool" in capsys.readouterr().err


def test_call_command_bad_argument(fake_client, capsys):
    assert cli.main(["call", "get_alerts", "CA"]) == 2
    assert fake_client.calls == []
