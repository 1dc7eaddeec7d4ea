"""Query parameter validation for the JSON endpoints."""

import math
import re
from dataclasses import dataclass

from edge_api.errors import ClientInputError


MAX_FORECAST_DAYS = 16
MIN_FORECAST_DAYS = 1
DEFAULT_RATES_BASE = "USD"

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True)
class ForecastQuery:
    """Either a place name to geocode or explicit coordinates."""

    q: str | None = None
    lat: float | None = None
    lon: float | None = None

    @property
    def by_name(self) -> bool:
        return self.q is not None


@dataclass(frozen=True)
class RatesQuery:
    base: str
    symbols: tuple[str, ...]


def _to_number(raw: str) -> float:
    try:
        return float(raw.strip())
    except ValueError:
        return math.nan


def parse_coordinates(lat_raw: str | None, lon_raw: str | None) -> tuple[float, float]:
    """Validate a lat/lon pair.

    Args:
        lat_raw: Raw latitude parameter.
        lon_raw: Raw longitude parameter.

    Returns:
        Tuple of (lat, lon).

    Raises:
        ClientInputError: Missing, non-numeric or out-of-range values.
    """
    if not lat_raw or not lon_raw:
        raise ClientInputError("Missing required query params: lat and lon")

    lat = _to_number(lat_raw)
    lon = _to_number(lon_raw)
    if not math.isfinite(lat) or not math.isfinite(lon):
        raise ClientInputError("lat and lon must be numbers")
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        raise ClientInputError("lat must be between -90..90 and lon between -180..180")
    return lat, lon


def clamp_days(raw: str | None) -> int:
    """Parse the forecast length, defaulting to the provider maximum.

    Args:
        raw: Raw `days` parameter.

    Returns:
        Whole number of days in [1, 16].
    """
    if not raw:
        return MAX_FORECAST_DAYS
    value = _to_number(raw)
    if not math.isfinite(value):
        return MAX_FORECAST_DAYS
    return int(max(MIN_FORECAST_DAYS, min(MAX_FORECAST_DAYS, value)))


def parse_forecast_query(
    q: str | None,
    lat_raw: str | None,
    lon_raw: str | None,
) -> ForecastQuery:
    """Validate the mutually exclusive forecast location parameters.

    Args:
        q: City name.
        lat_raw: Raw latitude parameter.
        lon_raw: Raw longitude parameter.

    Returns:
        ForecastQuery holding either the name or the coordinates.

    Raises:
        ClientInputError: Both forms given, neither given, or bad coordinates.
    """
    if q and (lat_raw or lon_raw):
        raise ClientInputError("Provide either q (city name) OR lat/lon, not both")
    if q:
        return ForecastQuery(q=q)
    if not lat_raw or not lon_raw:
        raise ClientInputError("Provide q (city name) or both lat and lon")

    lat, lon = parse_coordinates(lat_raw, lon_raw)
    return ForecastQuery(lat=lat, lon=lon)


def parse_rates_query(base_raw: str | None, symbols_raw: str | None) -> RatesQuery:
    """Validate currency codes for the rates endpoint.

    Args:
        base_raw: Raw `base` parameter (default USD).
        symbols_raw: Raw comma-separated `symbols` parameter.

    Returns:
        RatesQuery with upper-cased, de-duplicated codes; the base
        currency is never listed among the symbols.

    Raises:
        ClientInputError: Any code that is not three ASCII letters.
    """
    base = (base_raw or DEFAULT_RATES_BASE).strip().upper()
    if not _CURRENCY_CODE.match(base):
        raise ClientInputError("base must be a three-letter currency code")

    symbols: list[str] = []
    for item in (symbols_raw or "").split(","):
        code = item.strip().upper()
        if not code:
            continue
        if not _CURRENCY_CODE.match(code):
            raise ClientInputError(
                "symbols must be a comma-separated list of three-letter currency codes"
            )
        if code != base and code not in symbols:
            symbols.append(code)

    return RatesQuery(base=base, symbols=tuple(symbols))
