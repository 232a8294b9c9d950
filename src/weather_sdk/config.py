"""SDK configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_SDK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Upstream API settings
    api_url: str = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        description="OpenWeather current weather endpoint",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Upstream request timeout in seconds",
        ge=0.1,
        le=60.0,
    )

    # Cache settings
    cache_ttl_seconds: float = Field(
        default=600.0,
        description="Time a cached city stays fresh, in seconds",
        gt=0,
    )
    cache_max_size: int = Field(
        default=10,
        description="Maximum number of cached cities",
        ge=1,
    )

    # Polling settings
    polling_interval_seconds: float = Field(
        default=300.0,
        description="Interval between background refreshes in polling mode",
        gt=0,
    )
    shutdown_timeout_seconds: float = Field(
        default=5.0,
        description="How long close() waits for an in-flight refresh",
        ge=0,
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log format (json or text)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached SDK settings."""
    return Settings()
