"""Camera endpoints backed by the external bridge.

- GET|HEAD /camera/stream?cameraId=ID
- POST /camera/ptz {cameraId, action, durationMs?}, with CORS preflight

The /webcam/* aliases behave identically but also accept `id` in place
of `cameraId`.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from starlette.responses import Response

from edge_api.api.dependencies import GatewayServices, get_services
from edge_api.api.routes.media import ANY_METHOD
from edge_api.errors import ClientInputError, MethodNotAllowedError
from edge_api.proxy.bridge import parse_control_body
from edge_api.proxy.headers import CORS_HEADERS
from edge_api.proxy.stream import ensure_stream_method


router = APIRouter(tags=["camera"])

CONTROL_METHODS: tuple[str, ...] = ("POST", "OPTIONS")

PREFLIGHT_HEADERS: dict[str, str] = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": ", ".join(CONTROL_METHODS),
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "600",
}


async def _stream(
    request: Request,
    services: GatewayServices,
    camera_id: str | None,
) -> Response:
    method = ensure_stream_method(request.method)
    if not camera_id:
        raise ClientInputError("Missing required query param: cameraId")
    return await services.bridge.stream(method, camera_id, request.headers)


async def _control(
    request: Request,
    services: GatewayServices,
    id_alias: bool,
) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)
    if request.method != "POST":
        raise MethodNotAllowedError(CONTROL_METHODS)

    command = parse_control_body(await request.body(), id_alias=id_alias)
    return await services.bridge.control(command)


@router.api_route("/camera/stream", methods=ANY_METHOD)
async def camera_stream(
    request: Request,
    services: Annotated[GatewayServices, Depends(get_services)],
    camera_id: Annotated[str | None, Query(alias="cameraId")] = None,
) -> Response:
    """Relay a camera stream from the bridge."""
    return await _stream(request, services, camera_id)


@router.api_route("/webcam/stream", methods=ANY_METHOD)
async def webcam_stream(
    request: Request,
    services: Annotated[GatewayServices, Depends(get_services)],
    camera_id: Annotated[str | None, Query(alias="cameraId")] = None,
    id_: Annotated[str | None, Query(alias="id")] = None,
) -> Response:
    """Alias of /camera/stream accepting `id` as well."""
    return await _stream(request, services, camera_id or id_)


@router.api_route("/camera/ptz", methods=ANY_METHOD)
async def camera_ptz(
    request: Request,
    services: Annotated[GatewayServices, Depends(get_services)],
) -> Response:
    """Forward a pan/tilt command to the bridge."""
    return await _control(request, services, id_alias=False)


@router.api_route("/webcam/ptz", methods=ANY_METHOD)
async def webcam_ptz(
    request: Request,
    services: Annotated[GatewayServices, Depends(get_services)],
) -> Response:
    """Alias of /camera/ptz accepting `id` in the body as well."""
    return await _control(request, services, id_alias=True)
