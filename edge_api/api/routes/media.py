"""Range-preserving media proxy.

GET|HEAD /video?url=<absolute http(s) URL>
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from starlette.responses import Response

from edge_api.api.dependencies import GatewayServices, get_services
from edge_api.proxy.stream import ensure_stream_method, validate_media_target


router = APIRouter(tags=["media"])

# Registered for every method so unsupported ones get the route's own Allow header
ANY_METHOD: list[str] = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/video", methods=ANY_METHOD)
async def proxy_video(
    request: Request,
    services: Annotated[GatewayServices, Depends(get_services)],
    url: Annotated[str | None, Query()] = None,
) -> Response:
    """Relay a remote media object, preserving byte-range semantics."""
    method = ensure_stream_method(request.method)
    target = validate_media_target(url, services.settings.allowed_video_hosts)
    return await services.proxy.forward(
        method,
        target,
        request.headers,
        relay_location=True,
    )
