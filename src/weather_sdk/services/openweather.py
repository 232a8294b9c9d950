"""OpenWeather API client."""

from typing import Any, Protocol

import httpx
import structlog
from prometheus_client import Counter, Histogram
from pydantic import ValidationError

from weather_sdk.config import Settings, get_settings
from weather_sdk.errors import (
    CityNotFoundError,
    InvalidArgumentError,
    InvalidCredentialError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    UpstreamError,
    WeatherTimeoutError,
)
from weather_sdk.models import WeatherResponse

logger = structlog.get_logger()

# Metrics
upstream_requests = Counter(
    "weather_sdk_upstream_requests_total",
    "Total upstream API requests",
    ["status"],
)
upstream_duration = Histogram(
    "weather_sdk_upstream_request_duration_seconds",
    "Upstream request duration in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


class WeatherFetcher(Protocol):
    """Anything that can fetch current weather for a city."""

    def fetch(self, city_name: str) -> WeatherResponse: ...


class OpenWeatherClient:
    """HTTP client for the OpenWeather current weather API."""

    def __init__(self, api_key: str, settings: Settings | None = None) -> None:
        """Initialize client with API key and settings."""
        if api_key is None or not api_key.strip():
            raise InvalidCredentialError("API key cannot be null or empty")

        settings = settings or get_settings()
        self._api_key = api_key.strip()
        self._base_url = settings.api_url
        self._timeout = settings.request_timeout_seconds

    def fetch(self, city_name: str) -> WeatherResponse:
        """Fetch current weather for a city.

        Args:
            city_name: City name as understood by OpenWeather, e.g. "London"

        Returns:
            Parsed weather snapshot

        Raises:
            InvalidCredentialError: On HTTP 401
            CityNotFoundError: On HTTP 404
            RateLimitError: On HTTP 429
            UpstreamError: On any other non-200 status
            WeatherTimeoutError: If the request times out
            NetworkError: On other transport failures
            MalformedResponseError: If the body cannot be parsed
        """
        if city_name is None or not city_name.strip():
            raise InvalidArgumentError("City name cannot be null or empty")

        params = {"q": city_name, "appid": self._api_key}

        with upstream_duration.time():
            try:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.get(self._base_url, params=params)

            except httpx.TimeoutException as e:
                upstream_requests.labels(status="timeout").inc()
                raise WeatherTimeoutError(
                    f"OpenWeather API request timed out after {self._timeout}s"
                ) from e

            except httpx.RequestError as e:
                upstream_requests.labels(status="error").inc()
                raise NetworkError(f"Network error while requesting OpenWeather API: {e}") from e

        if response.status_code != 200:
            upstream_requests.labels(status=str(response.status_code)).inc()
            self._raise_for_status(response, city_name)

        upstream_requests.labels(status="success").inc()
        logger.debug("Fetched weather from upstream", city=city_name)
        return self._parse_response(response)

    def _raise_for_status(self, response: httpx.Response, city_name: str) -> None:
        status_code = response.status_code

        if status_code == 401:
            raise InvalidCredentialError("Invalid API key. Please check your credentials.")
        if status_code == 404:
            raise CityNotFoundError(city_name)
        if status_code == 429:
            raise RateLimitError("API rate limit exceeded. Please try again later.")

        raise UpstreamError(
            f"OpenWeather API returned {status_code}: {self._extract_error_message(response)}",
            status_code,
        )

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or "Unknown error"
        if isinstance(data, dict) and "message" in data:
            return str(data["message"])
        return "Unknown error"

    def _parse_response(self, response: httpx.Response) -> WeatherResponse:
        """Parse OpenWeather API response.

        Raises:
            MalformedResponseError: If the body is not JSON or lacks required fields
        """
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("OpenWeather API returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise MalformedResponseError("Unexpected OpenWeather response structure")

        return self.parse_payload(data)

    @staticmethod
    def parse_payload(data: dict[str, Any]) -> WeatherResponse:
        """Map the upstream JSON document onto a WeatherResponse.

        Raises:
            MalformedResponseError: If required fields are missing or invalid
        """
        conditions = data.get("weather")
        if not conditions:
            raise MalformedResponseError("Missing 'weather' field in response")

        for field in ("main", "wind", "sys"):
            if field not in data:
                raise MalformedResponseError(f"Missing '{field}' field in response")

        main = data["main"]
        sys = data["sys"]
        try:
            return WeatherResponse(
                name=data.get("name", ""),
                weather={
                    "main": conditions[0]["main"],
                    "description": conditions[0]["description"],
                },
                temperature={"temp": main["temp"], "feels_like": main["feels_like"]},
                visibility=data.get("visibility", 0),
                wind={"speed": data["wind"]["speed"]},
                datetime=data["dt"],
                sys={"sunrise": sys["sunrise"], "sunset": sys["sunset"]},
                timezone=data.get("timezone", 0),
            )
        except (KeyError, IndexError, TypeError, ValidationError) as e:
            raise MalformedResponseError(f"Failed to parse API response: {e}") from e
