"""Liveness and metrics endpoints."""

import time

from fastapi import APIRouter
from starlette.responses import Response

from edge_api.api.responses import cache_control, json_response
from edge_api.fetch.constants import STATUS_CACHE_MAX_AGE_SECONDS
from edge_api.fetch.metrics import FetchMetrics


router = APIRouter(tags=["status"])


@router.get("/status")
@router.get("/health")
async def status() -> Response:
    """Report that the gateway is up, with the current epoch milliseconds."""
    return json_response(
        {"status": "ok", "timestamp": int(time.time() * 1000)},
        headers=cache_control(STATUS_CACHE_MAX_AGE_SECONDS),
    )


@router.get("/metrics")
async def metrics() -> Response:
    """Expose the fetch metrics snapshot."""
    return json_response(FetchMetrics.get_instance().to_dict())
