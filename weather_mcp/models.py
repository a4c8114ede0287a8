"""Data shapes passed between the dispatcher, the providers and the renderer."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import WeatherToolError

# Area codes accepted by the NWS active-alerts `area` filter for states and territories
US_STATE_CODES = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    "DC", "AS", "GU", "MP", "PR", "VI", "UM", "FM", "MH", "PW",
})


@dataclass(frozen=True)
class ToolRequest:
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments or {})))


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __str__(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass
class ForecastPeriod:
    """One normalized forecast bucket, whichever provider produced it."""
    name: str
    temperature: Optional[float]
    temperature_unit: str
    wind_speed: str
    wind_direction: str
    short_forecast: str
    temperature_low: Optional[float] = None
    detailed_forecast: Optional[str] = None
    precipitation: Optional[str] = None
    # IANA zone the provider resolved the local dates in, when it reports one
    timezone: Optional[str] = None


@dataclass
class AlertSummary:
    event: str
    severity: str
    area: str
    headline: Optional[str] = None
    description: Optional[str] = None
    instruction: Optional[str] = None


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call: rendered text, or an error kind and message."""
    text: Optional[str] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(text=text)

    @classmethod
    def failure(cls, error: WeatherToolError) -> "ToolResult":
        return cls(error_kind=error.kind, error_message=error.message)

    def describe_error(self) -> str:
        return f"{self.error_kind}: {self.error_message}"
