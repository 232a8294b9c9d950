"""Cache service for weather data."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from cachetools import LRUCache
from prometheus_client import Counter

from weather_sdk.errors import InvalidArgumentError

if TYPE_CHECKING:
    from weather_sdk.models import WeatherResponse

logger = structlog.get_logger()

# Metrics
cache_hits = Counter("weather_sdk_cache_hits_total", "Total cache hits")
cache_misses = Counter("weather_sdk_cache_misses_total", "Total cache misses")
cache_evictions = Counter(
    "weather_sdk_cache_evictions_total",
    "Entries evicted to stay within the size limit",
)
cache_expirations = Counter(
    "weather_sdk_cache_expirations_total",
    "Stale entries dropped on read",
)


def normalize_key(city_name: str) -> str:
    """Create cache key from a city name.

    "  New York " and "new york" share one entry.
    """
    return city_name.strip().lower()


@dataclass(frozen=True)
class CacheEntry:
    """Weather snapshot and the clock reading at which it was fetched."""

    payload: WeatherResponse
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, now: float, ttl: float) -> bool:
        return self.age(now) < ttl


class WeatherCache:
    """Thread-safe LRU cache for weather data with a fixed TTL.

    Every operation runs under one lock, so callers never observe a
    half-applied update. Stale entries are dropped lazily when read.
    """

    def __init__(
        self,
        max_size: int = 10,
        ttl_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            max_size: Maximum number of cities kept
            ttl_seconds: Seconds an entry stays fresh
            clock: Zero-argument callable returning the current time in seconds

        Raises:
            InvalidArgumentError: If max_size or ttl_seconds is not positive
        """
        if max_size <= 0:
            raise InvalidArgumentError(f"Cache size must be positive, got {max_size}")
        if ttl_seconds <= 0:
            raise InvalidArgumentError(f"Cache TTL must be positive, got {ttl_seconds}")

        self._entries: LRUCache[str, CacheEntry] = LRUCache(maxsize=max_size)
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return int(self._entries.maxsize)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def now(self) -> float:
        """Return the current reading of the cache clock."""
        return self._clock()

    def get(self, city_name: str) -> CacheEntry | None:
        """Get a fresh entry for the city and mark it most recently used."""
        key = normalize_key(city_name)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                cache_misses.inc()
                return None
            if not entry.is_fresh(self._clock(), self._ttl):
                del self._entries[key]
                cache_expirations.inc()
                cache_misses.inc()
                return None
            cache_hits.inc()
            return entry

    def put(self, city_name: str, entry: CacheEntry) -> None:
        """Insert or replace the entry for the city.

        Evicts the least recently used city when the cache is full.

        Raises:
            InvalidArgumentError: If entry is None
        """
        if entry is None:
            raise InvalidArgumentError("Cache entry cannot be None")

        key = normalize_key(city_name)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._entries.maxsize:
                evicted, _ = self._entries.popitem()
                cache_evictions.inc()
                logger.debug("Evicted least recently used city", city=evicted)
            self._entries[key] = entry

    def put_if_present(self, city_name: str, entry: CacheEntry) -> bool:
        """Replace the entry only if the city is still cached.

        Returns:
            True if the entry was replaced
        """
        if entry is None:
            raise InvalidArgumentError("Cache entry cannot be None")

        key = normalize_key(city_name)
        with self._lock:
            if key not in self._entries:
                return False
            self._entries[key] = entry
            return True

    def remove(self, city_name: str) -> None:
        """Remove the entry for the city, if any."""
        key = normalize_key(city_name)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()

    def keys(self) -> set[str]:
        """Return a snapshot of the normalized city keys."""
        with self._lock:
            return set(self._entries.keys())

    def contains(self, city_name: str) -> bool:
        """Check whether a fresh entry exists for the city."""
        return self.get(city_name) is not None

    @property
    def size(self) -> int:
        """Return current cache size."""
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, city_name: object) -> bool:
        return isinstance(city_name, str) and self.contains(city_name)
