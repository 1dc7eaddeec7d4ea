"""Pure mappings from provider documents to normalized payloads."""

from edge_api.transforms.data import chucknorris_joke, coingecko_price
from edge_api.transforms.models import (
    CurrentConditions,
    DailyForecast,
    ExchangeRates,
    GeocodeResult,
    HourlyPrecipitation,
    WeatherNow,
)
from edge_api.transforms.rates import frankfurter_rates, open_er_api_rates
from edge_api.transforms.weather import (
    map_open_meteo_daily,
    parse_met_no_now,
    parse_open_meteo_geocoding,
    parse_open_meteo_now,
    utc_now_iso,
)


__all__ = [
    # Models
    "CurrentConditions",
    "DailyForecast",
    "ExchangeRates",
    "GeocodeResult",
    "HourlyPrecipitation",
    "WeatherNow",
    # Data
    "chucknorris_joke",
    "coingecko_price",
    # Weather
    "map_open_meteo_daily",
    "parse_met_no_now",
    "parse_open_meteo_geocoding",
    "parse_open_meteo_now",
    "utc_now_iso",
    # Rates
    "frankfurter_rates",
    "open_er_api_rates",
]
