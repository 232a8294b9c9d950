"""Tests for OpenWeather client."""

import httpx
import pytest
import respx
from conftest import openweather_payload
from httpx import Response

from weather_sdk.config import Settings
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
from weather_sdk.services.openweather import OpenWeatherClient


class TestOpenWeatherClient:
    """Tests for OpenWeatherClient."""

    @respx.mock
    def test_fetch_success(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test successful weather fetch."""
        route = respx.get(settings.api_url).mock(
            return_value=Response(200, json=openweather_payload("London"))
        )

        result = openweather_client.fetch("London")

        assert result.name == "London"
        assert result.weather.main == "Clouds"
        assert result.weather.description == "scattered clouds"
        assert result.temperature.temp == 288.15
        assert result.temperature.feels_like == 287.6
        assert result.visibility == 10000
        assert result.wind.speed == 4.1
        assert result.datetime == 1700000000
        assert result.sys.sunrise == 1699945200
        assert result.sys.sunset == 1699978800
        assert result.timezone == 0

        request = route.calls.last.request
        assert request.url.params["q"] == "London"
        assert request.url.params["appid"] == "test-api-key-1234"

    @respx.mock
    def test_fetch_invalid_key(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test 401 maps to InvalidCredentialError."""
        respx.get(settings.api_url).mock(
            return_value=Response(401, json={"cod": 401, "message": "Invalid API key"})
        )

        with pytest.raises(InvalidCredentialError):
            openweather_client.fetch("London")

    @respx.mock
    def test_fetch_city_not_found(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test 404 maps to CityNotFoundError."""
        respx.get(settings.api_url).mock(
            return_value=Response(404, json={"cod": "404", "message": "city not found"})
        )

        with pytest.raises(CityNotFoundError) as exc_info:
            openweather_client.fetch("Atlantis")

        assert exc_info.value.city_name == "Atlantis"

    @respx.mock
    def test_fetch_rate_limited(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test 429 maps to RateLimitError."""
        respx.get(settings.api_url).mock(return_value=Response(429, json={"cod": 429}))

        with pytest.raises(RateLimitError):
            openweather_client.fetch("London")

    @respx.mock
    def test_fetch_server_error(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test 5xx maps to UpstreamError with the status code."""
        respx.get(settings.api_url).mock(
            return_value=Response(500, text="Internal Server Error")
        )

        with pytest.raises(UpstreamError) as exc_info:
            openweather_client.fetch("London")

        assert exc_info.value.status_code == 500

    @respx.mock
    def test_fetch_other_status_includes_message(
        self, settings: Settings, openweather_client: OpenWeatherClient
    ) -> None:
        """Test upstream message is carried into the error."""
        respx.get(settings.api_url).mock(
            return_value=Response(400, json={"cod": "400", "message": "Nothing to geocode"})
        )

        with pytest.raises(UpstreamError, match="Nothing to geocode") as exc_info:
            openweather_client.fetch("London")

        assert exc_info.value.status_code == 400

    @respx.mock
    def test_fetch_timeout(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test timeout handling."""
        respx.get(settings.api_url).mock(side_effect=httpx.TimeoutException("timeout"))

        with pytest.raises(WeatherTimeoutError):
            openweather_client.fetch("London")

    @respx.mock
    def test_fetch_connection_error(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test transport errors map to NetworkError."""
        respx.get(settings.api_url).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(NetworkError):
            openweather_client.fetch("London")

    @respx.mock
    def test_fetch_non_json_body(self, settings: Settings, openweather_client: OpenWeatherClient) -> None:
        """Test a 200 with a non-JSON body is malformed."""
        respx.get(settings.api_url).mock(return_value=Response(200, text="<html>oops</html>"))

        with pytest.raises(MalformedResponseError):
            openweather_client.fetch("London")

    @respx.mock
    def test_fetch_missing_main_raises_error(
        self, settings: Settings, openweather_client: OpenWeatherClient
    ) -> None:
        """Test parsing response with missing temperature block raises error."""
        payload = openweather_payload()
        del payload["main"]
        respx.get(settings.api_url).mock(return_value=Response(200, json=payload))

        with pytest.raises(MalformedResponseError, match="Missing 'main' field"):
            openweather_client.fetch("London")

    @respx.mock
    def test_fetch_missing_nested_field_raises_error(
        self, settings: Settings, openweather_client: OpenWeatherClient
    ) -> None:
        """Test parsing response with missing nested fields raises error."""
        payload = openweather_payload()
        del payload["sys"]["sunset"]
        respx.get(settings.api_url).mock(return_value=Response(200, json=payload))

        with pytest.raises(MalformedResponseError, match="Failed to parse"):
            openweather_client.fetch("London")

    def test_blank_api_key_raises(self, settings: Settings) -> None:
        """Test client rejects a blank key."""
        with pytest.raises(InvalidCredentialError):
            OpenWeatherClient("   ", settings)

    def test_blank_city_raises(self, openweather_client: OpenWeatherClient) -> None:
        """Test client rejects a blank city without a request."""
        with pytest.raises(InvalidArgumentError):
            openweather_client.fetch("  ")
