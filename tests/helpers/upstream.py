"""Fake upstream services for tests.

Provides an httpx transport that:
- Returns scripted responses for registered URL prefixes
- Blocks every unregistered request
- Records all request attempts for assertions
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx


Reply = (
    httpx.Response
    | Exception
    | Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]
)


class NetworkAccessBlockedError(Exception):
    """Raised when a test reaches an upstream that was not registered."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Network access blocked: {url}")


@dataclass
class RecordedRequest:
    """One request seen by the fake upstream."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes


@dataclass
class _Route:
    prefix: str
    replies: list[Reply]
    calls: list[RecordedRequest] = field(default_factory=list)


def _copy(response: httpx.Response) -> httpx.Response:
    return httpx.Response(
        response.status_code,
        headers=response.headers,
        content=response.content,
    )


class FakeUpstream:
    """Scripted upstream keyed by URL prefix.

    Replies registered for a prefix are served in order; the last one
    repeats once the script runs out. The longest matching prefix wins.
    """

    def __init__(self) -> None:
        self._routes: list[_Route] = []
        self.requests: list[RecordedRequest] = []

    def add(self, prefix: str, *replies: Reply) -> None:
        """Register replies for every URL starting with prefix."""
        if not replies:
            msg = "at least one reply is required"
            raise ValueError(msg)
        self._routes.append(_Route(prefix=prefix, replies=list(replies)))
        self._routes.sort(key=lambda route: len(route.prefix), reverse=True)

    def calls(self, prefix: str) -> list[RecordedRequest]:
        """Requests served by the route registered under prefix."""
        for route in self._routes:
            if route.prefix == prefix:
                return route.calls
        return []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        record = RecordedRequest(
            method=request.method,
            url=url,
            headers=dict(request.headers),
            body=await request.aread(),
        )
        self.requests.append(record)

        for route in self._routes:
            if url.startswith(route.prefix):
                route.calls.append(record)
                index = min(len(route.calls), len(route.replies)) - 1
                return await self._reply(route.replies[index], request)

        raise NetworkAccessBlockedError(url)

    @staticmethod
    async def _reply(reply: Reply, request: httpx.Request) -> httpx.Response:
        if isinstance(reply, httpx.Response):
            return _copy(reply)
        if isinstance(reply, Exception):
            raise reply
        result = reply(request)
        if isinstance(result, httpx.Response):
            return result
        return await result


def json_reply(status_code: int, payload: object) -> httpx.Response:
    """Build a JSON response for a fake upstream."""
    return httpx.Response(status_code, json=payload)
