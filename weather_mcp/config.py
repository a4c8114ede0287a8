import os
import logging

# Upstream endpoints
NWS_API_BASE = os.environ.get("WEATHER_NWS_API_BASE", "https://api.weather.gov").rstrip("/")
OPEN_METEO_API_BASE = os.environ.get("WEATHER_OPEN_METEO_API_BASE", "https://api.open-meteo.com/v1").rstrip("/")

# NWS asks every client to identify itself
USER_AGENT = os.environ.get("WEATHER_USER_AGENT", "weather-mcp/0.1.0")

HTTP_TIMEOUT = float(os.environ.get("WEATHER_HTTP_TIMEOUT", "30.0"))

# Open-Meteo query options
FORECAST_DAYS = int(os.environ.get("WEATHER_FORECAST_DAYS", "7"))
TEMPERATURE_UNIT = os.environ.get("WEATHER_TEMPERATURE_UNIT", "celsius")
WIND_SPEED_UNIT = os.environ.get("WEATHER_WIND_SPEED_UNIT", "kmh")

# Optional override of the domestic bounding boxes, see classifier.parse_regions
DOMESTIC_REGIONS = os.environ.get("WEATHER_DOMESTIC_REGIONS")

LOG_DIR = os.environ.get("LOG_DIR", "logs")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def log_level() -> int:
    """Resolve LOG_LEVEL to a logging level, falling back to INFO."""
    level = logging.getLevelName(LOG_LEVEL)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(filename: str) -> str:
    """Send root logging to a file inside LOG_DIR.

    stdout carries the MCP stdio channel, so the server process must never
    log to it.
    """
    os.makedirs(LOG_DIR, exist_ok=True)
    path = os.path.join(LOG_DIR, filename)
    logging.basicConfig(filename=path, level=log_level(), format=LOG_FORMAT)
    return path


def attach_file_handler(logger: logging.Logger, path: str) -> None:
    """Attach a single FileHandler for `path` to `logger`.

    Creating several clients in one process must not duplicate log lines.
    """
    normalized = os.path.abspath(path)
    os.makedirs(os.path.dirname(normalized), exist_ok=True)
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and os.path.abspath(h.baseFilename) == normalized:
            return
    handler = logging.FileHandler(normalized)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(log_level())
    # Keep server chatter out of the root logger's console output
    logger.propagate = False
