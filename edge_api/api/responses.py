"""JSON response helpers and the cached-response flow."""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import BackgroundTasks, Request
from pydantic import BaseModel
from starlette.responses import Response

from edge_api.cache.models import CachedResponse, cache_key_for_url
from edge_api.cache.store import ResponseCacheFacade
from edge_api.errors import AllProvidersFailedError, UpstreamRejectedError
from edge_api.providers.models import AllFailed, FallbackOutcome, Success


JSON_MEDIA_TYPE = "application/json"


def to_jsonable(value: Any) -> Any:  # noqa: ANN401
    """Convert payload models to plain JSON-compatible values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    return value


def json_response(
    data: Any,  # noqa: ANN401
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> Response:
    """Render a compact JSON response.

    Args:
        data: Payload; pydantic models are dumped first.
        status_code: HTTP status.
        headers: Extra response headers.

    Returns:
        Response with an application/json body.
    """
    body = json.dumps(to_jsonable(data), separators=(",", ":"), ensure_ascii=False)
    return Response(
        content=body.encode("utf-8"),
        status_code=status_code,
        headers=headers,
        media_type=JSON_MEDIA_TYPE,
    )


def cache_control(ttl_seconds: int) -> dict[str, str]:
    """Build the Cache-Control header advertising a TTL."""
    return {"Cache-Control": f"public, max-age={ttl_seconds}"}


def replay(entry: CachedResponse) -> Response:
    """Rebuild a response byte-for-byte from a cache entry."""
    response = Response(content=entry.body, status_code=entry.status_code)
    response.raw_headers = [
        (key.encode("latin-1"), value.encode("latin-1")) for key, value in entry.headers
    ]
    return response


def sent_headers(response: Response) -> list[tuple[str, str]]:
    """Headers exactly as they will be sent, in order."""
    return [
        (key.decode("latin-1"), value.decode("latin-1"))
        for key, value in response.raw_headers
    ]


async def serve_cached(
    request: Request,
    cache: ResponseCacheFacade,
    background: BackgroundTasks,
    ttl_seconds: int,
    produce: Callable[[], Awaitable[Any]],
) -> Response:
    """Serve a JSON payload through the response cache.

    A fresh cache entry is replayed without calling produce(). Otherwise
    the payload is produced, sent with a matching Cache-Control header,
    and stored after the response has gone out. Errors raised by
    produce() propagate and are never cached.

    Args:
        request: Inbound request; its full URL is the cache key.
        cache: Response cache facade.
        background: Background tasks of the current request.
        ttl_seconds: Cache lifetime and advertised max-age.
        produce: Coroutine factory returning the payload.

    Returns:
        Replayed or freshly rendered response.
    """
    key = cache_key_for_url(str(request.url))
    cached = await cache.lookup(key)
    if cached is not None:
        return replay(cached)

    payload = await produce()
    response = json_response(payload, headers=cache_control(ttl_seconds))
    background.add_task(
        cache.store,
        key,
        response.status_code,
        sent_headers(response),
        bytes(response.body),
        ttl_seconds,
    )
    return response


def unwrap_outcome(outcome: FallbackOutcome, exhausted_message: str) -> Success:
    """Turn a failed chain outcome into the matching gateway error.

    Args:
        outcome: Result of a fallback chain.
        exhausted_message: Error text when every provider failed.

    Returns:
        The Success outcome.

    Raises:
        UpstreamRejectedError: A provider gave a non-retryable status.
        AllProvidersFailedError: Every provider failed transiently.
    """
    if isinstance(outcome, Success):
        return outcome
    if isinstance(outcome, AllFailed):
        raise AllProvidersFailedError(exhausted_message)
    raise UpstreamRejectedError(
        "Upstream API error", details={"status": outcome.status_code}
    )
