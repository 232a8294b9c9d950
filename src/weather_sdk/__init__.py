"""Cached client for OpenWeather current weather data."""

from weather_sdk.errors import (
    CityNotFoundError,
    ConflictingModeError,
    InvalidArgumentError,
    InvalidCredentialError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    SDKClosedError,
    UpstreamError,
    WeatherSDKError,
    WeatherTimeoutError,
)
from weather_sdk.factory import SDKRegistry, get_registry
from weather_sdk.models import WeatherResponse
from weather_sdk.sdk import OperationMode, WeatherSDK

__version__ = "0.1.0"

__all__ = [
    "CityNotFoundError",
    "ConflictingModeError",
    "InvalidArgumentError",
    "InvalidCredentialError",
    "MalformedResponseError",
    "NetworkError",
    "OperationMode",
    "RateLimitError",
    "SDKClosedError",
    "SDKRegistry",
    "UpstreamError",
    "WeatherResponse",
    "WeatherSDK",
    "WeatherSDKError",
    "WeatherTimeoutError",
    "__version__",
    "get_registry",
]
