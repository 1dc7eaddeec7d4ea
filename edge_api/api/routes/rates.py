"""Currency exchange rates endpoint."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from starlette.responses import Response

from edge_api.api.dependencies import GatewayServices, get_services
from edge_api.api.responses import serve_cached, unwrap_outcome
from edge_api.api.validation import parse_rates_query
from edge_api.fetch.constants import RATES_CACHE_TTL_SECONDS
from edge_api.providers.catalog import rates_chain
from edge_api.transforms.models import ExchangeRates


router = APIRouter(tags=["rates"])


@router.get("/rates")
async def get_rates(
    request: Request,
    background: BackgroundTasks,
    services: Annotated[GatewayServices, Depends(get_services)],
    base: Annotated[str | None, Query()] = None,
    symbols: Annotated[str | None, Query()] = None,
) -> Response:
    """Return rates for a base currency, optionally limited to symbols."""
    query = parse_rates_query(base, symbols)

    async def produce() -> ExchangeRates:
        outcome = await rates_chain(query.base, query.symbols).run(services.fetcher)
        payload: ExchangeRates = unwrap_outcome(outcome, "All rate providers failed").payload
        return payload

    return await serve_cached(
        request, services.cache, background, RATES_CACHE_TTL_SECONDS, produce
    )
