"""Generic data endpoint backed by the crypto/joke provider chain."""

from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from starlette.responses import Response

from edge_api.api.dependencies import GatewayServices, get_services
from edge_api.api.responses import serve_cached, unwrap_outcome
from edge_api.fetch.constants import DATA_CACHE_TTL_SECONDS
from edge_api.providers.catalog import data_chain


router = APIRouter(tags=["data"])


@router.get("/data")
async def get_data(
    request: Request,
    background: BackgroundTasks,
    services: Annotated[GatewayServices, Depends(get_services)],
) -> Response:
    """Return the first provider payload that resolves."""

    async def produce() -> dict[str, Any]:
        outcome = await data_chain().run(services.fetcher)
        success = unwrap_outcome(outcome, "All providers failed")
        return {"provider": success.provider, "payload": success.payload}

    return await serve_cached(
        request, services.cache, background, DATA_CACHE_TTL_SECONDS, produce
    )
