"""Fixed header allow-lists for the streaming proxies.

Only the headers named here cross the proxy. Everything else, hop-by-hop
headers and cookies included, is dropped in both directions.
"""

from collections.abc import Mapping


# Request headers forwarded upstream: byte ranges and cache validators
FORWARDED_REQUEST_HEADERS: tuple[str, ...] = (
    "Range",
    "If-Range",
    "If-None-Match",
    "If-Modified-Since",
)

# Response headers relayed to the client
RELAYED_RESPONSE_HEADERS: tuple[str, ...] = (
    "content-type",
    "content-length",
    "accept-ranges",
    "content-range",
    "etag",
    "last-modified",
    "date",
    "cache-control",
    "expires",
    "vary",
)

# Media proxy also relays redirect targets
LOCATION_HEADER = "location"

ALLOW_ORIGIN_HEADER = "Access-Control-Allow-Origin"
ALLOW_ORIGIN_ANY = "*"
CORS_HEADERS: dict[str, str] = {ALLOW_ORIGIN_HEADER: ALLOW_ORIGIN_ANY}

ACCEPT_RANGES_HEADER = "Accept-Ranges"
ACCEPT_RANGES_BYTES = "bytes"

# Relayed bodies are passed through undecoded
IDENTITY_ENCODING: dict[str, str] = {"Accept-Encoding": "identity"}


def forwarded_request_headers(incoming: Mapping[str, str]) -> dict[str, str]:
    """Select the request headers that may be sent upstream.

    Args:
        incoming: Headers of the inbound request (case-insensitive mapping).

    Returns:
        Allow-listed headers with non-empty values.
    """
    lowered = {key.lower(): value for key, value in incoming.items()}
    forwarded: dict[str, str] = {}
    for name in FORWARDED_REQUEST_HEADERS:
        value = lowered.get(name.lower())
        if value:
            forwarded[name] = value
    return forwarded


def relayed_response_headers(
    upstream: Mapping[str, str],
    relay_location: bool = False,
) -> dict[str, str]:
    """Build the client-facing headers from an upstream response.

    Always adds the permissive CORS header, and advertises byte-range
    support when the upstream did not say either way.

    Args:
        upstream: Upstream response headers.
        relay_location: Also relay the Location header.

    Returns:
        Headers to send to the client.
    """
    lowered = {key.lower(): value for key, value in upstream.items()}
    names = RELAYED_RESPONSE_HEADERS
    if relay_location:
        names = (*names, LOCATION_HEADER)

    relayed: dict[str, str] = {}
    for name in names:
        value = lowered.get(name)
        if value:
            relayed[name] = value

    relayed.update(CORS_HEADERS)
    if "accept-ranges" not in relayed:
        relayed[ACCEPT_RANGES_HEADER] = ACCEPT_RANGES_BYTES
    return relayed
