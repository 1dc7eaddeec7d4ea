"""Upstream URL builders and provider chains for each JSON endpoint."""

from collections.abc import Sequence
from datetime import datetime
from functools import partial

import httpx

from edge_api.fetch.constants import (
    DATA_CHAIN_TIMEOUT_SECONDS,
    RATES_CHAIN_TIMEOUT_SECONDS,
    WEATHER_CHAIN_TIMEOUT_SECONDS,
)
from edge_api.providers.chain import FallbackChain
from edge_api.providers.models import ProviderSpec
from edge_api.transforms.data import chucknorris_joke, coingecko_price
from edge_api.transforms.rates import frankfurter_rates, open_er_api_rates
from edge_api.transforms.weather import parse_met_no_now, parse_open_meteo_now


COINGECKO_PRICE_URL = (
    "https://api.coingecko.com/api/v3/simple/price?ids=bitcoin&vs_currencies=usd"
)
CHUCKNORRIS_RANDOM_URL = "https://api.chucknorris.io/jokes/random"

OPEN_METEO_GEOCODING = "https://geocoding-api.open-meteo.com/v1/search"
OPEN_METEO_FORECAST = "https://api.open-meteo.com/v1/forecast"
MET_NO_COMPACT = "https://api.met.no/weatherapi/locationforecast/2.0/compact"

FRANKFURTER_LATEST = "https://api.frankfurter.app/latest"
OPEN_ER_API_LATEST = "https://open.er-api.com/v6/latest"

OPEN_METEO_CURRENT_FIELDS = "temperature_2m,precipitation,weather_code,wind_speed_10m"
OPEN_METEO_HOURLY_FIELDS = "precipitation,precipitation_probability"
OPEN_METEO_DAILY_FIELDS = (
    "weathercode,temperature_2m_max,temperature_2m_min,precipitation_sum,"
    "precipitation_probability_max,windspeed_10m_max"
)


def _with_params(base: str, params: dict[str, str]) -> str:
    return str(httpx.URL(base, params=params))


def _coord(value: float) -> str:
    """Render a coordinate without a trailing '.0' for whole numbers."""
    return str(int(value)) if value.is_integer() else repr(value)


def open_meteo_now_url(lat: float, lon: float) -> str:
    return _with_params(
        OPEN_METEO_FORECAST,
        {
            "latitude": _coord(lat),
            "longitude": _coord(lon),
            "current": OPEN_METEO_CURRENT_FIELDS,
            "hourly": OPEN_METEO_HOURLY_FIELDS,
            "timezone": "UTC",
        },
    )


def met_no_compact_url(lat: float, lon: float) -> str:
    return _with_params(MET_NO_COMPACT, {"lat": _coord(lat), "lon": _coord(lon)})


def open_meteo_forecast_url(lat: float, lon: float, days: int) -> str:
    return _with_params(
        OPEN_METEO_FORECAST,
        {
            "latitude": _coord(lat),
            "longitude": _coord(lon),
            "daily": OPEN_METEO_DAILY_FIELDS,
            "timezone": "UTC",
            "forecast_days": str(days),
        },
    )


def open_meteo_geocoding_url(name: str) -> str:
    return _with_params(
        OPEN_METEO_GEOCODING,
        {"name": name, "count": "1", "language": "en", "format": "json"},
    )


def frankfurter_url(base: str, symbols: Sequence[str]) -> str:
    params = {"from": base}
    if symbols:
        params["to"] = ",".join(symbols)
    return _with_params(FRANKFURTER_LATEST, params)


def open_er_api_url(base: str) -> str:
    return f"{OPEN_ER_API_LATEST}/{base}"


def data_chain() -> FallbackChain:
    """Crypto price first, falling back to a joke when CoinGecko blocks us."""
    return FallbackChain(
        name="data",
        providers=[
            ProviderSpec(
                name="coingecko",
                url=COINGECKO_PRICE_URL,
                transform=coingecko_price,
            ),
            ProviderSpec(
                name="chucknorris",
                url=CHUCKNORRIS_RANDOM_URL,
                transform=chucknorris_joke,
            ),
        ],
        timeout_seconds=DATA_CHAIN_TIMEOUT_SECONDS,
    )


def weather_now_chain(
    lat: float,
    lon: float,
    now: datetime | None = None,
) -> FallbackChain:
    """Open-Meteo first, MET Norway as the interchangeable fallback.

    Args:
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        now: Reference instant for the hourly window (default: now).

    Returns:
        Chain producing WeatherNow payloads.
    """
    return FallbackChain(
        name="weather_now",
        providers=[
            ProviderSpec(
                name="open-meteo",
                url=open_meteo_now_url(lat, lon),
                transform=partial(parse_open_meteo_now, lat=lat, lon=lon, now=now),
            ),
            ProviderSpec(
                name="met-no",
                url=met_no_compact_url(lat, lon),
                transform=partial(parse_met_no_now, lat=lat, lon=lon, now=now),
            ),
        ],
        timeout_seconds=WEATHER_CHAIN_TIMEOUT_SECONDS,
    )


def rates_chain(base: str, symbols: Sequence[str]) -> FallbackChain:
    """Frankfurter (ECB data) first, open.er-api.com as the fallback.

    Args:
        base: Three-letter base currency code.
        symbols: Requested currency codes; empty for all.

    Returns:
        Chain producing ExchangeRates payloads.
    """
    return FallbackChain(
        name="rates",
        providers=[
            ProviderSpec(
                name="frankfurter",
                url=frankfurter_url(base, symbols),
                transform=frankfurter_rates,
            ),
            ProviderSpec(
                name="open-er-api",
                url=open_er_api_url(base),
                transform=partial(open_er_api_rates, symbols=tuple(symbols)),
            ),
        ],
        timeout_seconds=RATES_CHAIN_TIMEOUT_SECONDS,
    )
