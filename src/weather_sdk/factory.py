"""Registry keeping one WeatherSDK instance per API key."""

import threading
from functools import lru_cache

import structlog

from weather_sdk.config import Settings
from weather_sdk.errors import ConflictingModeError, InvalidArgumentError, InvalidCredentialError
from weather_sdk.logging import mask_api_key
from weather_sdk.sdk import OperationMode, WeatherSDK
from weather_sdk.services.openweather import WeatherFetcher

logger = structlog.get_logger()


class SDKRegistry:
    """Process-wide map of API key to WeatherSDK.

    Reusing one instance per key avoids duplicate polling threads for the
    same account. All methods are thread-safe.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._instances: dict[str, WeatherSDK] = {}
        self._lock = threading.Lock()

    def acquire(
        self,
        api_key: str,
        mode: OperationMode = OperationMode.ON_DEMAND,
        *,
        fetcher: WeatherFetcher | None = None,
    ) -> WeatherSDK:
        """Get the SDK for api_key, creating it on first use.

        Raises:
            InvalidCredentialError: If api_key is None or blank
            InvalidArgumentError: If mode is None
            ConflictingModeError: If the key is registered with another mode
        """
        if api_key is None or not api_key.strip():
            raise InvalidCredentialError("API key cannot be null or empty")
        if mode is None:
            raise InvalidArgumentError("Operation mode cannot be null")

        key = api_key.strip()
        mode = OperationMode(mode)

        with self._lock:
            existing = self._instances.get(key)
            if existing is not None:
                if existing.mode is not mode:
                    raise ConflictingModeError(
                        f"SDK with this API key already exists in {existing.mode.value} mode, "
                        f"but {mode.value} was requested. Release it first or use the existing mode."
                    )
                logger.info("Returning existing WeatherSDK instance", api_key=mask_api_key(key))
                return existing

            sdk = WeatherSDK(key, mode, fetcher=fetcher, settings=self._settings)
            self._instances[key] = sdk

        logger.info(
            "Created new WeatherSDK instance",
            api_key=mask_api_key(key),
            mode=mode.value,
        )
        return sdk

    def release(self, api_key: str) -> bool:
        """Remove and close the SDK for api_key.

        Returns:
            True if an instance was removed
        """
        if api_key is None or not api_key.strip():
            return False

        key = api_key.strip()
        with self._lock:
            sdk = self._instances.pop(key, None)

        if sdk is None:
            return False

        sdk.close()
        logger.info("Removed WeatherSDK instance", api_key=mask_api_key(key))
        return True

    def release_all(self) -> None:
        """Close and remove every registered SDK."""
        with self._lock:
            instances = list(self._instances.items())
            self._instances.clear()

        for key, sdk in instances:
            sdk.close()
            logger.info("Closed WeatherSDK instance", api_key=mask_api_key(key))

        logger.info("All WeatherSDK instances removed", count=len(instances))

    def has_instance(self, api_key: str) -> bool:
        if api_key is None:
            return False
        with self._lock:
            return api_key.strip() in self._instances

    @property
    def count(self) -> int:
        """Return number of registered SDK instances."""
        with self._lock:
            return len(self._instances)


@lru_cache
def get_registry() -> SDKRegistry:
    """Get the process-wide SDK registry."""
    return SDKRegistry()
