"""Transforms for weather and geocoding providers.

Open-Meteo and MET Norway describe the same conditions with different
document shapes; both are normalized to WeatherNow. Missing optional
fields become None instead of failing the transform.
"""

from datetime import UTC, datetime
from typing import Any

from edge_api.transforms.models import (
    CurrentConditions,
    DailyForecast,
    GeocodeResult,
    HourlyPrecipitation,
    WeatherNow,
)


NEXT_HOURS_COUNT = 3


def utc_now_iso(now: datetime | None = None) -> str:
    """Format an instant like a JavaScript ISO string (ms precision, Z suffix).

    Provider timestamps are compared against this string lexically.

    Args:
        now: Instant to format (default: current time).

    Returns:
        ISO-8601 string such as 2024-05-01T10:15:30.000Z.
    """
    instant = (now or datetime.now(UTC)).astimezone(UTC)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _at(values: Any, index: int) -> Any:  # noqa: ANN401
    if isinstance(values, list) and index < len(values):
        return values[index]
    return None


def _mapping(value: Any) -> dict[str, Any]:  # noqa: ANN401
    return value if isinstance(value, dict) else {}


def parse_open_meteo_now(
    document: dict[str, Any],
    lat: float,
    lon: float,
    now: datetime | None = None,
) -> WeatherNow:
    """Normalize an Open-Meteo forecast document.

    Accepts either the `current` block or the legacy `current_weather`
    block. The next three hourly entries at or after now are taken in the
    provider's own order.

    Args:
        document: Decoded Open-Meteo response.
        lat: Requested latitude.
        lon: Requested longitude.
        now: Reference instant for the hourly window.

    Returns:
        Normalized current conditions.
    """
    current: CurrentConditions | None = None
    if isinstance(document.get("current"), dict):
        block = document["current"]
        current = CurrentConditions(
            temperature_c=block.get("temperature_2m"),
            precipitation_mm=block.get("precipitation"),
            weather_code=block.get("weather_code"),
            wind_speed_10m=block.get("wind_speed_10m"),
            time=block.get("time"),
        )
    elif isinstance(document.get("current_weather"), dict):
        block = document["current_weather"]
        current = CurrentConditions(
            temperature_c=block.get("temperature"),
            precipitation_mm=None,
            weather_code=block.get("weathercode"),
            wind_speed_10m=block.get("windspeed"),
            time=block.get("time"),
        )

    next3h: list[HourlyPrecipitation] = []
    hourly = _mapping(document.get("hourly"))
    times = hourly.get("time")
    if isinstance(times, list):
        now_iso = utc_now_iso(now)
        precipitation = hourly.get("precipitation") or []
        probability = hourly.get("precipitation_probability") or []
        for index, time in enumerate(times):
            if not isinstance(time, str) or time < now_iso:
                continue
            next3h.append(
                HourlyPrecipitation(
                    time=time,
                    precipitation_mm=_at(precipitation, index),
                    precipitation_probability=_at(probability, index),
                )
            )
            if len(next3h) >= NEXT_HOURS_COUNT:
                break

    return WeatherNow(lat=lat, lon=lon, current=current, next3h=next3h)


def parse_met_no_now(
    document: dict[str, Any],
    lat: float,
    lon: float,
    now: datetime | None = None,
) -> WeatherNow:
    """Normalize a MET Norway locationforecast/compact document.

    The first timeseries entry is the current state; MET Norway has no
    precipitation probability in the compact product.

    Args:
        document: Decoded MET Norway response.
        lat: Requested latitude.
        lon: Requested longitude.
        now: Reference instant for the hourly window.

    Returns:
        Normalized current conditions.
    """
    timeseries = _mapping(document.get("properties")).get("timeseries")
    if not isinstance(timeseries, list) or not timeseries:
        return WeatherNow(lat=lat, lon=lon)

    first = _mapping(timeseries[0])
    data = _mapping(first.get("data"))
    instant = _mapping(_mapping(data.get("instant")).get("details"))
    next_hour = _mapping(data.get("next_1_hours"))
    current = CurrentConditions(
        temperature_c=instant.get("air_temperature"),
        precipitation_mm=_mapping(next_hour.get("details")).get("precipitation_amount"),
        weather_code=_mapping(next_hour.get("summary")).get("symbol_code"),
        wind_speed_10m=instant.get("wind_speed"),
        time=first.get("time"),
    )

    next3h: list[HourlyPrecipitation] = []
    now_iso = utc_now_iso(now)
    for entry in timeseries:
        entry_map = _mapping(entry)
        time = entry_map.get("time")
        if not isinstance(time, str) or time < now_iso:
            continue
        details = _mapping(
            _mapping(_mapping(entry_map.get("data")).get("next_1_hours")).get("details")
        )
        next3h.append(
            HourlyPrecipitation(
                time=time,
                precipitation_mm=details.get("precipitation_amount"),
                precipitation_probability=None,
            )
        )
        if len(next3h) >= NEXT_HOURS_COUNT:
            break

    return WeatherNow(lat=lat, lon=lon, current=current, next3h=next3h)


def map_open_meteo_daily(document: dict[str, Any]) -> list[DailyForecast]:
    """Map Open-Meteo daily arrays to one record per date.

    Args:
        document: Decoded Open-Meteo daily forecast response.

    Returns:
        Daily records in the provider's date order.
    """
    daily = _mapping(document.get("daily"))
    times = daily.get("time")
    if not isinstance(times, list):
        return []

    return [
        DailyForecast(
            date=date,
            weather_code=_at(daily.get("weathercode"), index),
            temp_max_c=_at(daily.get("temperature_2m_max"), index),
            temp_min_c=_at(daily.get("temperature_2m_min"), index),
            precipitation_mm=_at(daily.get("precipitation_sum"), index),
            precipitation_probability_percent=_at(
                daily.get("precipitation_probability_max"), index
            ),
            windspeed_10m_max_kmh=_at(daily.get("windspeed_10m_max"), index),
        )
        for index, date in enumerate(times)
    ]


def parse_open_meteo_geocoding(document: dict[str, Any]) -> GeocodeResult | None:
    """Take the best match from an Open-Meteo geocoding search.

    Args:
        document: Decoded geocoding response.

    Returns:
        The first result, or None when the place is unknown.
    """
    results = document.get("results")
    if not isinstance(results, list) or not results:
        return None
    first = _mapping(results[0])
    if first.get("latitude") is None or first.get("longitude") is None:
        return None
    return GeocodeResult(
        lat=float(first["latitude"]),
        lon=float(first["longitude"]),
        name=first.get("name"),
        country=first.get("country"),
    )
