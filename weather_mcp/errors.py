"""Error taxonomy shared by the dispatcher and the provider adapters.

Every error carries a stable ``kind`` that is reported back to the tool caller
together with the human readable message.
"""


class WeatherToolError(Exception):
    kind = "WeatherToolError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidArgumentError(WeatherToolError):
    """Tool arguments are missing, malformed or out of range."""
    kind = "InvalidArgument"


class UnknownToolError(WeatherToolError):
    """The requested tool name is not served here."""
    kind = "UnknownTool"


class UnsupportedLocationError(WeatherToolError):
    """The domestic provider cannot resolve the coordinates to a forecast grid."""
    kind = "UnsupportedLocation"


class UpstreamError(WeatherToolError):
    """Transport failure, timeout or non-success status from a provider."""
    kind = "UpstreamError"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(WeatherToolError):
    """Provider response body does not have the expected shape."""
    kind = "ParseError"
