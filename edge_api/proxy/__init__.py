"""Streaming proxies for media URLs and the camera bridge."""

from edge_api.proxy.bridge import (
    ALLOWED_ACTIONS,
    BridgeClient,
    CameraAction,
    ControlCommand,
    parse_control_body,
)
from edge_api.proxy.headers import (
    CORS_HEADERS,
    FORWARDED_REQUEST_HEADERS,
    RELAYED_RESPONSE_HEADERS,
    forwarded_request_headers,
    relayed_response_headers,
)
from edge_api.proxy.stream import (
    STREAM_METHODS,
    RangeProxy,
    ensure_stream_method,
    validate_media_target,
)


__all__ = [
    # Headers
    "CORS_HEADERS",
    "FORWARDED_REQUEST_HEADERS",
    "RELAYED_RESPONSE_HEADERS",
    "forwarded_request_headers",
    "relayed_response_headers",
    # Media proxy
    "STREAM_METHODS",
    "RangeProxy",
    "ensure_stream_method",
    "validate_media_target",
    # Bridge
    "ALLOWED_ACTIONS",
    "BridgeClient",
    "CameraAction",
    "ControlCommand",
    "parse_control_body",
]
