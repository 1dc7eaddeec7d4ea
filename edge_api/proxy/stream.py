"""Range-preserving streaming proxy for media URLs."""

from collections.abc import Mapping, Sequence
from urllib.parse import urlsplit

import httpx
import structlog
from starlette.background import BackgroundTask
from starlette.responses import Response, StreamingResponse

from edge_api.errors import (
    ClientInputError,
    HostNotAllowedError,
    MethodNotAllowedError,
    UpstreamUnavailableError,
)
from edge_api.fetch.constants import PROXY_CONNECT_TIMEOUT_SECONDS
from edge_api.fetch.metrics import FetchMetrics
from edge_api.fetch.redact import redact_headers, redact_url_credentials
from edge_api.proxy.headers import (
    IDENTITY_ENCODING,
    forwarded_request_headers,
    relayed_response_headers,
)


logger = structlog.get_logger()

STREAM_METHODS: tuple[str, ...] = ("GET", "HEAD")
ALLOWED_SCHEMES = frozenset({"http", "https"})

# Streams may idle indefinitely between chunks
PROXY_TIMEOUT = httpx.Timeout(PROXY_CONNECT_TIMEOUT_SECONDS, read=None)


def ensure_stream_method(method: str) -> str:
    """Reject anything but GET and HEAD.

    Args:
        method: Inbound request method.

    Returns:
        The upper-cased method.

    Raises:
        MethodNotAllowedError: For any other method.
    """
    upper = method.upper()
    if upper not in STREAM_METHODS:
        raise MethodNotAllowedError(STREAM_METHODS)
    return upper


def validate_media_target(
    target: str | None,
    allowed_hosts: Sequence[str] = (),
) -> str:
    """Validate a client-supplied media URL.

    Args:
        target: Raw value of the `url` query parameter.
        allowed_hosts: Host allow-list; empty allows every host.

    Returns:
        The validated absolute URL.

    Raises:
        ClientInputError: Missing, unparseable or non-http(s) URL.
        HostNotAllowedError: Host outside a non-empty allow-list.
    """
    if not target:
        raise ClientInputError("Missing required query param: url")

    try:
        parts = urlsplit(target)
        hostname = parts.hostname
    except ValueError as e:
        raise ClientInputError("Invalid url") from e

    if not parts.scheme:
        raise ClientInputError("Invalid url")
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise ClientInputError("Only http(s) URLs are allowed")
    if not hostname:
        raise ClientInputError("Invalid url")

    if allowed_hosts and hostname not in allowed_hosts:
        raise HostNotAllowedError("Host not allowed")

    return target


class RangeProxy:
    """Relays one upstream object with byte-range semantics intact.

    - Only allow-listed request headers are forwarded, with no body
    - Upstream status is copied verbatim
    - Only allow-listed response headers are relayed, plus CORS
    - GET bodies are streamed chunk by chunk without buffering or
      decoding; HEAD responses carry no body
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the proxy.

        Args:
            client: Shared async HTTP client.
        """
        self._client = client
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="proxy")

    async def forward(
        self,
        method: str,
        url: str,
        incoming_headers: Mapping[str, str],
        extra_headers: Mapping[str, str] | None = None,
        relay_location: bool = False,
    ) -> Response:
        """Forward a GET or HEAD request and relay the upstream response.

        Args:
            method: Inbound method, GET or HEAD.
            url: Upstream URL.
            incoming_headers: Inbound request headers.
            extra_headers: Headers injected by the gateway (e.g. bearer token).
            relay_location: Also relay the Location header.

        Returns:
            Streaming response (GET) or header-only response (HEAD).

        Raises:
            MethodNotAllowedError: For methods other than GET/HEAD.
            UpstreamUnavailableError: If the upstream cannot be reached.
        """
        method = ensure_stream_method(method)
        headers = forwarded_request_headers(incoming_headers)
        headers.update(IDENTITY_ENCODING)
        if extra_headers:
            headers.update(extra_headers)

        log = self._log.bind(
            method=method,
            url=redact_url_credentials(url),
            headers=redact_headers(headers),
        )

        request = self._client.build_request(
            method, url, headers=headers, timeout=PROXY_TIMEOUT
        )
        try:
            upstream = await self._client.send(
                request, stream=True, follow_redirects=False
            )
        except httpx.HTTPError as e:
            log.warning("proxy_upstream_unavailable", error=str(e))
            raise UpstreamUnavailableError(
                "Upstream unavailable", details={"detail": str(e)}
            ) from e

        self._metrics.record_proxy_stream()
        relayed = relayed_response_headers(upstream.headers, relay_location=relay_location)
        log.info(
            "proxy_stream",
            status_code=upstream.status_code,
            content_range=relayed.get("content-range"),
        )

        if method == "HEAD":
            await upstream.aclose()
            return Response(status_code=upstream.status_code, headers=relayed)

        return StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            headers=relayed,
            background=BackgroundTask(upstream.aclose),
        )
