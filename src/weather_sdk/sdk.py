"""Weather SDK orchestrating cache, fetcher and background refresh."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from enum import Enum
from types import TracebackType

import structlog
from prometheus_client import Counter

from weather_sdk.config import Settings, get_settings
from weather_sdk.errors import InvalidArgumentError, InvalidCredentialError, SDKClosedError
from weather_sdk.logging import mask_api_key
from weather_sdk.models import WeatherResponse
from weather_sdk.services.cache import CacheEntry, WeatherCache
from weather_sdk.services.openweather import OpenWeatherClient, WeatherFetcher

logger = structlog.get_logger()

# Metrics
polling_refreshes = Counter(
    "weather_sdk_polling_refresh_total",
    "Background refresh attempts per city",
    ["result"],
)


class OperationMode(str, Enum):
    """SDK operating modes."""

    # Fetch only when a caller asks for an uncached or stale city
    ON_DEMAND = "on_demand"
    # Additionally refresh every cached city in the background
    POLLING = "polling"


class WeatherSDK:
    """Client for current weather with caching.

    In ON_DEMAND mode data is fetched on cache miss only. In POLLING mode a
    daemon thread also re-fetches every cached city once per polling interval,
    so foreground calls are usually answered from the cache.

    Usage:
        with WeatherSDK("your-api-key") as sdk:
            weather = sdk.get_weather("London")
            print(weather.name, weather.temperature.temp_celsius)
    """

    def __init__(
        self,
        api_key: str,
        mode: OperationMode | None = OperationMode.ON_DEMAND,
        *,
        fetcher: WeatherFetcher | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an SDK instance.

        Args:
            api_key: OpenWeather API key
            mode: Operating mode, ON_DEMAND when None
            fetcher: Source of weather data, an OpenWeatherClient by default
            settings: SDK settings, the environment-derived ones by default
            clock: Time source for cache freshness

        Raises:
            InvalidCredentialError: If api_key is None or blank
        """
        if api_key is None or not api_key.strip():
            raise InvalidCredentialError("API key cannot be null or empty")

        self._settings = settings or get_settings()
        self._api_key = api_key.strip()
        self._mode = OperationMode(mode) if mode is not None else OperationMode.ON_DEMAND
        self._fetcher = fetcher or OpenWeatherClient(self._api_key, self._settings)
        self._cache = WeatherCache(
            max_size=self._settings.cache_max_size,
            ttl_seconds=self._settings.cache_ttl_seconds,
            clock=clock,
        )

        self._closed = False
        # Guards the closed flag together with every cache write
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self._poller: threading.Thread | None = None

        if self._mode is OperationMode.POLLING:
            self._start_polling()

        logger.info(
            "WeatherSDK initialized",
            mode=self._mode.value,
            api_key=mask_api_key(self._api_key),
        )

    @property
    def mode(self) -> OperationMode:
        return self._mode

    @property
    def cached_count(self) -> int:
        """Return the number of cached cities."""
        return self._cache.size

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_weather(self, city_name: str) -> WeatherResponse:
        """Get current weather for a city.

        Checks cache first, fetches from upstream on cache miss. Fetch errors
        are raised to the caller unchanged.

        Args:
            city_name: City name, surrounding whitespace is ignored

        Returns:
            Weather snapshot for the city

        Raises:
            InvalidArgumentError: If city_name is None or blank
            SDKClosedError: If the SDK has been closed
            WeatherSDKError: Any error raised by the fetcher
        """
        if city_name is None or not city_name.strip():
            raise InvalidArgumentError("City name cannot be null or empty")
        if self._closed:
            raise SDKClosedError("WeatherSDK is closed")

        city = city_name.strip()

        cached = self._cache.get(city)
        if cached is not None:
            logger.debug("Cache hit for weather request", city=city, cache_hit=True)
            return cached.payload

        logger.debug("Cache miss, fetching from upstream", city=city, cache_hit=False)
        payload = self._fetcher.fetch(city)

        with self._state_lock:
            if not self._closed:
                self._cache.put(city, CacheEntry(payload, self._cache.now()))

        return payload

    def clear_cache(self) -> None:
        """Remove every cached city."""
        self._cache.clear()
        logger.info("Cache cleared")

    def close(self) -> None:
        """Stop background refresh and release cached data.

        Safe to call more than once; never raises.
        """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True

        self._stop.set()
        poller = self._poller
        if poller is not None and poller is not threading.current_thread():
            poller.join(timeout=self._settings.shutdown_timeout_seconds)
            if poller.is_alive():
                # Daemon thread; writes check the closed flag under the state lock.
                logger.warning(
                    "Polling thread did not stop in time, abandoning it",
                    timeout_seconds=self._settings.shutdown_timeout_seconds,
                )

        with self._state_lock:
            self._cache.clear()
        logger.info("WeatherSDK closed", api_key=mask_api_key(self._api_key))

    def __enter__(self) -> WeatherSDK:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _start_polling(self) -> None:
        self._poller = threading.Thread(
            target=self._poll_loop,
            name="weather-sdk-polling",
            daemon=True,
        )
        self._poller.start()
        logger.info(
            "Polling started",
            interval_seconds=self._settings.polling_interval_seconds,
        )

    def _poll_loop(self) -> None:
        interval = self._settings.polling_interval_seconds
        # wait() returns True once close() sets the event
        while not self._stop.wait(interval):
            self._refresh_cached_cities()

    def _refresh_cached_cities(self) -> None:
        """Re-fetch every cached city, one at a time.

        A failure for one city is logged and does not stop the others.
        Cities removed from the cache while the sweep runs are not restored.
        """
        cities = self._cache.keys()
        logger.debug("Refreshing cached cities", count=len(cities))

        for city in cities:
            if self._stop.is_set():
                return

            try:
                payload = self._fetcher.fetch(city)
            except Exception as e:
                polling_refreshes.labels(result="failed").inc()
                logger.warning(
                    "Failed to refresh cached city",
                    city=city,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            with self._state_lock:
                if self._closed:
                    return
                entry = CacheEntry(payload, self._cache.now())
                refreshed = self._cache.put_if_present(city, entry)

            if refreshed:
                polling_refreshes.labels(result="refreshed").inc()
                logger.debug("Refreshed cached city", city=city)
            else:
                polling_refreshes.labels(result="skipped").inc()
