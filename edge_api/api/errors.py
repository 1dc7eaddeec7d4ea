"""Exception handlers rendering gateway errors for clients."""

import structlog
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse, Response

from edge_api.api.responses import json_response
from edge_api.errors import GatewayError
from edge_api.proxy.headers import CORS_HEADERS


logger = structlog.get_logger()

# Router-level failures rendered as plain text
PLAIN_TEXT_STATUSES: dict[int, str] = {
    404: "Not Found",
    405: "Method Not Allowed",
}


async def gateway_error_handler(request: Request, exc: Exception) -> Response:
    """Render a GatewayError as JSON, or text for plain-text errors."""
    if not isinstance(exc, GatewayError):
        raise exc

    headers = dict(exc.headers)
    if exc.cors:
        headers.update(CORS_HEADERS)

    log = logger.bind(status_code=exc.status_code, error=exc.message)
    if exc.status_code >= 500:
        log.warning("gateway_error")
    else:
        log.info("client_error")

    if exc.plain_text:
        return PlainTextResponse(exc.message, status_code=exc.status_code, headers=headers)
    return json_response(exc.to_dict(), status_code=exc.status_code, headers=headers)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Render unknown routes and unsupported methods as plain text."""
    if not isinstance(exc, StarletteHTTPException):
        raise exc

    text = PLAIN_TEXT_STATUSES.get(exc.status_code)
    if text is not None:
        return PlainTextResponse(
            text, status_code=exc.status_code, headers=exc.headers
        )
    return json_response(
        {"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the gateway's exception handlers to an application."""
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
