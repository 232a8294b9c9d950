"""Test fixtures."""

import threading
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from weather_sdk.config import Settings
from weather_sdk.factory import SDKRegistry
from weather_sdk.models import WeatherResponse
from weather_sdk.services.cache import WeatherCache
from weather_sdk.services.openweather import OpenWeatherClient


def make_weather(name: str = "London", temp: float = 288.15, observed_at: int = 1700000000) -> WeatherResponse:
    """Build a weather snapshot for tests."""
    return WeatherResponse(
        name=name,
        weather={"main": "Clouds", "description": "scattered clouds"},
        temperature={"temp": temp, "feels_like": temp - 1.5},
        visibility=10000,
        wind={"speed": 4.1},
        datetime=observed_at,
        sys={"sunrise": 1699945200, "sunset": 1699978800},
        timezone=0,
    )


def openweather_payload(name: str = "London") -> dict[str, Any]:
    """Upstream JSON body as returned by the current weather endpoint."""
    return {
        "coord": {"lon": -0.1257, "lat": 51.5085},
        "weather": [{"id": 802, "main": "Clouds", "description": "scattered clouds", "icon": "03d"}],
        "base": "stations",
        "main": {"temp": 288.15, "feels_like": 287.6, "pressure": 1012, "humidity": 81},
        "visibility": 10000,
        "wind": {"speed": 4.1, "deg": 80},
        "dt": 1700000000,
        "sys": {"country": "GB", "sunrise": 1699945200, "sunset": 1699978800},
        "timezone": 0,
        "name": name,
        "cod": 200,
    }


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubFetcher:
    """Fetcher recording every call, optionally failing for chosen cities."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.on_fetch: Callable[[str], None] | None = None
        self._lock = threading.Lock()

    def fetch(self, city_name: str) -> WeatherResponse:
        with self._lock:
            self.calls.append(city_name)
            call_number = len(self.calls)
        if self.on_fetch is not None:
            self.on_fetch(city_name)
        error = self.failures.get(city_name.lower())
        if error is not None:
            raise error
        return make_weather(name=city_name, observed_at=call_number)

    def count(self, city_name: str) -> int:
        with self._lock:
            return sum(1 for call in self.calls if call.lower() == city_name.lower())


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        request_timeout_seconds=1.0,
        cache_ttl_seconds=600,
        cache_max_size=10,
        polling_interval_seconds=300,
        shutdown_timeout_seconds=1.0,
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> WeatherCache:
    """Create test cache with the canonical limits."""
    return WeatherCache(max_size=10, ttl_seconds=600, clock=clock)


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def openweather_client(settings: Settings) -> OpenWeatherClient:
    """Create test OpenWeather client."""
    return OpenWeatherClient("test-api-key-1234", settings)


@pytest.fixture
def registry(settings: Settings) -> Iterator[SDKRegistry]:
    """Create a registry and close everything it created."""
    registry = SDKRegistry(settings)
    yield registry
    registry.release_all()
