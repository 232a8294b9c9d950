"""Exception hierarchy raised by the SDK."""


class WeatherSDKError(Exception):
    """Base exception for all SDK errors."""


class InvalidArgumentError(WeatherSDKError, ValueError):
    """Raised when a caller passes a missing or blank argument."""


class InvalidCredentialError(WeatherSDKError):
    """Raised when the API key is blank or rejected upstream."""


class CityNotFoundError(WeatherSDKError):
    """Raised when the upstream API cannot resolve the city."""

    def __init__(self, city_name: str) -> None:
        super().__init__(f"City '{city_name}' not found")
        self.city_name = city_name


class RateLimitError(WeatherSDKError):
    """Raised when the upstream API throttles the account."""


class NetworkError(WeatherSDKError):
    """Raised on transport-level failures."""


class WeatherTimeoutError(NetworkError):
    """Raised when the upstream request times out."""


class UpstreamError(WeatherSDKError):
    """Raised when upstream returns an unexpected status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(WeatherSDKError):
    """Raised when the upstream body cannot be parsed."""


class SDKClosedError(WeatherSDKError):
    """Raised when an operation is attempted after close()."""


class ConflictingModeError(WeatherSDKError):
    """Raised when a registered API key is requested with another mode."""
