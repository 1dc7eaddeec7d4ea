"""Weather endpoints: current conditions and daily forecast.

- GET /weather?lat=..&lon=..
  Current conditions and the next three hours of precipitation, from
  Open-Meteo with MET Norway as fallback.
- GET /weather/forecast?q=City | ?lat=..&lon=..[&days=1..16]
  Daily forecast from Open-Meteo; city names are geocoded first.
"""

import json
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from starlette.responses import Response

from edge_api.api.dependencies import GatewayServices, get_services
from edge_api.api.responses import JSON_MEDIA_TYPE, serve_cached, unwrap_outcome
from edge_api.api.validation import (
    ForecastQuery,
    clamp_days,
    parse_coordinates,
    parse_forecast_query,
)
from edge_api.cache.models import cache_key_for_url
from edge_api.errors import ClientInputError, UpstreamRejectedError, UpstreamUnavailableError
from edge_api.fetch.constants import (
    FORECAST_CACHE_TTL_SECONDS,
    FORECAST_TIMEOUT_SECONDS,
    GEOCODING_CACHE_TTL_SECONDS,
    GEOCODING_TIMEOUT_SECONDS,
    WEATHER_NOW_CACHE_TTL_SECONDS,
)
from edge_api.providers.catalog import (
    open_meteo_forecast_url,
    open_meteo_geocoding_url,
    weather_now_chain,
)
from edge_api.transforms.models import GeocodeResult, WeatherNow
from edge_api.transforms.weather import map_open_meteo_daily, parse_open_meteo_geocoding


logger = structlog.get_logger()

router = APIRouter(prefix="/weather", tags=["weather"])


@router.get("")
async def get_weather_now(
    request: Request,
    background: BackgroundTasks,
    services: Annotated[GatewayServices, Depends(get_services)],
    lat: Annotated[str | None, Query()] = None,
    lon: Annotated[str | None, Query()] = None,
) -> Response:
    """Current conditions and precipitation outlook for a coordinate."""
    latitude, longitude = parse_coordinates(lat, lon)

    async def produce() -> WeatherNow:
        outcome = await weather_now_chain(latitude, longitude).run(services.fetcher)
        payload: WeatherNow = unwrap_outcome(outcome, "All weather providers failed").payload
        return payload

    return await serve_cached(
        request, services.cache, background, WEATHER_NOW_CACHE_TTL_SECONDS, produce
    )


@router.get("/forecast")
async def get_weather_forecast(
    request: Request,
    background: BackgroundTasks,
    services: Annotated[GatewayServices, Depends(get_services)],
    q: Annotated[str | None, Query()] = None,
    lat: Annotated[str | None, Query()] = None,
    lon: Annotated[str | None, Query()] = None,
    days: Annotated[str | None, Query()] = None,
) -> Response:
    """Daily forecast for a city name or a coordinate."""
    query = parse_forecast_query(q, lat, lon)
    forecast_days = clamp_days(days)

    async def produce() -> dict[str, Any]:
        if query.by_name:
            geo = await _geocode(services, background, query)
        else:
            geo = GeocodeResult(lat=query.lat, lon=query.lon)

        daily = await _fetch_daily(services, geo, forecast_days)
        return {
            "query": {"q": query.q} if query.by_name else {"lat": geo.lat, "lon": geo.lon},
            "location": {"lat": geo.lat, "lon": geo.lon, **geo.place()},
            "days": len(daily),
            "daily": daily,
        }

    return await serve_cached(
        request, services.cache, background, FORECAST_CACHE_TTL_SECONDS, produce
    )


async def _geocode(
    services: GatewayServices,
    background: BackgroundTasks,
    query: ForecastQuery,
) -> GeocodeResult:
    """Resolve a city name, reusing cached geocoding answers.

    Args:
        services: Application services.
        background: Background tasks for the cache store.
        query: Forecast query carrying the city name.

    Returns:
        Coordinates and place metadata of the best match.

    Raises:
        ClientInputError: Geocoding rejected the query or found nothing.
        UpstreamUnavailableError: Geocoding could not be reached or decoded.
    """
    url = open_meteo_geocoding_url(query.q or "")
    key = cache_key_for_url(url)

    cached = await services.cache.lookup(key)
    if cached is not None:
        body = _decode(cached.body, "Invalid geocoding response")
    else:
        result = await services.fetcher.fetch(
            url, deadline=services.fetcher.deadline_after(GEOCODING_TIMEOUT_SECONDS)
        )
        if result.status_code == 0:
            raise UpstreamUnavailableError(
                "Geocoding unavailable",
                details={"detail": result.error.message if result.error else None},
            )
        if not result.is_success:
            raise ClientInputError(f"Geocoding failed (status {result.status_code})")
        body = _decode(result.body_bytes, "Invalid geocoding response")
        background.add_task(
            services.cache.store,
            key,
            result.status_code,
            [("content-type", JSON_MEDIA_TYPE)],
            result.body_bytes,
            GEOCODING_CACHE_TTL_SECONDS,
        )

    geo = parse_open_meteo_geocoding(body if isinstance(body, dict) else {})
    if geo is None:
        raise ClientInputError("City not found")
    logger.debug("geocoded", q=query.q, lat=geo.lat, lon=geo.lon, cached=cached is not None)
    return geo


async def _fetch_daily(
    services: GatewayServices,
    geo: GeocodeResult,
    days: int,
) -> list[Any]:
    url = open_meteo_forecast_url(geo.lat, geo.lon, days)
    result = await services.fetcher.fetch(
        url, deadline=services.fetcher.deadline_after(FORECAST_TIMEOUT_SECONDS)
    )
    if result.status_code == 0:
        raise UpstreamUnavailableError(
            "Upstream weather failed",
            details={"detail": result.error.message if result.error else None},
        )
    if not result.is_success:
        raise UpstreamRejectedError(
            "Upstream weather failed", details={"status": result.status_code}
        )

    body = _decode(result.body_bytes, "Upstream weather failed")
    return list(map_open_meteo_daily(body if isinstance(body, dict) else {}))


def _decode(raw: bytes, message: str) -> Any:  # noqa: ANN401
    try:
        return json.loads(raw)
    except ValueError as e:
        raise UpstreamUnavailableError(message, details={"detail": str(e)}) from e
