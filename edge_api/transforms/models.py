"""Normalized payload models shared by interchangeable providers."""

from pydantic import BaseModel, ConfigDict, Field


class CurrentConditions(BaseModel):
    """Current weather at a coordinate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    temperature_c: int | float | None = None
    precipitation_mm: int | float | None = None
    weather_code: str | int | None = None
    wind_speed_10m: int | float | None = None
    time: str | None = None


class HourlyPrecipitation(BaseModel):
    """Precipitation outlook for one upcoming hour."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    time: str
    precipitation_mm: int | float | None = None
    precipitation_probability: int | float | None = None


class WeatherNow(BaseModel):
    """Current conditions plus the next three hourly entries."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    lat: float
    lon: float
    current: CurrentConditions | None = None
    next3h: list[HourlyPrecipitation] = Field(default_factory=list)


class DailyForecast(BaseModel):
    """One day of an Open-Meteo daily forecast."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: str
    weather_code: int | None = None
    temp_max_c: int | float | None = None
    temp_min_c: int | float | None = None
    precipitation_mm: int | float | None = None
    precipitation_probability_percent: int | float | None = None
    windspeed_10m_max_kmh: int | float | None = None


class GeocodeResult(BaseModel):
    """Coordinates resolved for a place name."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    lat: float
    lon: float
    name: str | None = None
    country: str | None = None

    def place(self) -> dict[str, str]:
        """Return the place fields that are present."""
        place: dict[str, str] = {}
        if self.name is not None:
            place["name"] = self.name
        if self.country is not None:
            place["country"] = self.country
        return place


class ExchangeRates(BaseModel):
    """Currency rates relative to a base currency."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base: str
    date: str | None = None
    rates: dict[str, int | float] = Field(default_factory=dict)
