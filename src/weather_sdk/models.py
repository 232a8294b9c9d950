"""Weather data models returned by the SDK."""

from pydantic import BaseModel, ConfigDict, Field

KELVIN_OFFSET = 273.15


class Weather(BaseModel):
    """Primary weather condition."""

    model_config = ConfigDict(frozen=True)

    main: str = Field(..., description="Condition group, e.g. Clouds")
    description: str = Field(..., description="Condition description")


class Temperature(BaseModel):
    """Temperature readings in Kelvin."""

    model_config = ConfigDict(frozen=True)

    temp: float = Field(..., description="Temperature in Kelvin")
    feels_like: float = Field(..., description="Perceived temperature in Kelvin")

    @property
    def temp_celsius(self) -> float:
        return self.temp - KELVIN_OFFSET

    @property
    def feels_like_celsius(self) -> float:
        return self.feels_like - KELVIN_OFFSET


class Wind(BaseModel):
    """Wind conditions."""

    model_config = ConfigDict(frozen=True)

    speed: float = Field(..., description="Wind speed in m/s")


class Sys(BaseModel):
    """Sunrise and sunset times."""

    model_config = ConfigDict(frozen=True)

    sunrise: int = Field(..., description="Sunrise, unix seconds UTC")
    sunset: int = Field(..., description="Sunset, unix seconds UTC")


class WeatherResponse(BaseModel):
    """Current weather snapshot for one city."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="City name as reported upstream")
    weather: Weather
    temperature: Temperature
    visibility: int = Field(..., description="Visibility in metres")
    wind: Wind
    datetime: int = Field(..., description="Observation time, unix seconds UTC")
    sys: Sys
    timezone: int = Field(..., description="Shift from UTC in seconds")
