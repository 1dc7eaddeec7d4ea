"""Unit tests for RangeProxy."""

from collections.abc import AsyncIterator

import httpx
import pytest
from starlette.responses import StreamingResponse

from edge_api.errors import UpstreamUnavailableError
from edge_api.fetch.metrics import FetchMetrics
from edge_api.proxy.stream import RangeProxy
from tests.helpers.upstream import FakeUpstream


MEDIA = "https://cdn.example.test/clip.mp4"
CLIP = bytes(range(256)) * 16


def partial_content(request: httpx.Request) -> httpx.Response:
    start, end = request.headers["range"].removeprefix("bytes=").split("-")
    chunk = CLIP[int(start) : int(end) + 1]
    return httpx.Response(
        206,
        headers={
            "Content-Type": "video/mp4",
            "Content-Range": f"bytes {start}-{end}/{len(CLIP)}",
            "Accept-Ranges": "bytes",
            "Set-Cookie": "cdn=1",
        },
        content=chunk,
    )


class ChunkedStream(httpx.AsyncByteStream):
    """Upstream body delivered in fixed pieces."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk


async def read_body(response: StreamingResponse) -> bytes:
    chunks = [chunk async for chunk in response.body_iterator]
    return b"".join(c if isinstance(c, bytes) else c.encode() for c in chunks)


class TestRangeProxy:
    """Tests for RangeProxy.forward."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        FetchMetrics.reset()

    @pytest.mark.asyncio
    async def test_forwards_range_and_relays_partial_content(self) -> None:
        """Test the 206 round trip with allow-listed headers."""
        upstream = FakeUpstream()
        upstream.add(MEDIA, partial_content)
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        response = await proxy.forward(
            "GET",
            MEDIA,
            {"Range": "bytes=0-99", "Cookie": "client=1"},
        )

        assert isinstance(response, StreamingResponse)
        assert response.status_code == 206
        assert response.headers["content-range"] == f"bytes 0-99/{len(CLIP)}"
        assert response.headers["access-control-allow-origin"] == "*"
        assert "set-cookie" not in response.headers
        assert await read_body(response) == CLIP[:100]

        sent = upstream.calls(MEDIA)[0]
        assert sent.method == "GET"
        assert sent.headers["range"] == "bytes=0-99"
        assert sent.headers["accept-encoding"] == "identity"
        assert "cookie" not in sent.headers
        assert sent.body == b""
        assert FetchMetrics.get_instance().proxy_streams_total == 1

    @pytest.mark.asyncio
    async def test_head_has_no_body(self) -> None:
        """Test that HEAD returns headers only."""
        upstream = FakeUpstream()
        upstream.add(
            MEDIA,
            httpx.Response(200, headers={"Content-Type": "video/mp4"}, content=CLIP),
        )
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        response = await proxy.forward("HEAD", MEDIA, {})

        assert not isinstance(response, StreamingResponse)
        assert response.status_code == 200
        assert response.body == b""
        assert response.headers["content-length"] == str(len(CLIP))
        assert response.headers["accept-ranges"] == "bytes"
        assert upstream.calls(MEDIA)[0].method == "HEAD"

    @pytest.mark.asyncio
    async def test_injects_extra_headers(self) -> None:
        """Test that gateway-provided headers reach the upstream."""
        upstream = FakeUpstream()
        upstream.add(MEDIA, httpx.Response(200, content=b"x"))
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        await proxy.forward("HEAD", MEDIA, {}, extra_headers={"Authorization": "Bearer t"})

        assert upstream.calls(MEDIA)[0].headers["authorization"] == "Bearer t"

    @pytest.mark.asyncio
    async def test_upstream_status_copied(self) -> None:
        """Test that error statuses are relayed verbatim."""
        upstream = FakeUpstream()
        upstream.add(MEDIA, httpx.Response(416, headers={"Content-Range": "bytes */4096"}))
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        response = await proxy.forward("GET", MEDIA, {"Range": "bytes=9999-"})

        assert response.status_code == 416
        assert response.headers["content-range"] == "bytes */4096"

    @pytest.mark.asyncio
    async def test_unreachable_upstream(self) -> None:
        """Test that connection failures become a 502 error."""
        upstream = FakeUpstream()
        upstream.add(MEDIA, httpx.ConnectError("no route to host"))
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await proxy.forward("GET", MEDIA, {})

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_chunks_relayed_as_received(self) -> None:
        """Test that upstream chunks reach the client unmerged."""
        upstream = FakeUpstream()
        upstream.add(
            MEDIA,
            lambda request: httpx.Response(
                200,
                headers={"Content-Type": "video/mp2t"},
                stream=ChunkedStream([b"frame1", b"frame2"]),
            ),
        )
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        response = await proxy.forward("GET", MEDIA, {})

        assert isinstance(response, StreamingResponse)
        assert [chunk async for chunk in response.body_iterator] == [b"frame1", b"frame2"]

    @pytest.mark.asyncio
    async def test_redirect_relayed_not_followed(self) -> None:
        """Test that a 3xx is returned to the client with its Location."""
        upstream = FakeUpstream()
        upstream.add(
            MEDIA,
            httpx.Response(302, headers={"Location": "http://internal.test/secret"}),
        )
        upstream.add("http://internal.test/", httpx.Response(200, content=b"secret"))
        client = httpx.AsyncClient(transport=upstream.transport(), follow_redirects=True)
        proxy = RangeProxy(client)

        response = await proxy.forward("GET", MEDIA, {}, relay_location=True)

        assert response.status_code == 302
        assert response.headers["location"] == "http://internal.test/secret"
        assert [r.url for r in upstream.requests] == [MEDIA]

    @pytest.mark.asyncio
    async def test_stream_has_no_read_timeout(self) -> None:
        """Test that idle gaps between chunks never time out the relay."""
        seen: list[dict[str, float | None]] = []

        def capture(request: httpx.Request) -> httpx.Response:
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, content=b"x")

        upstream = FakeUpstream()
        upstream.add(MEDIA, capture)
        proxy = RangeProxy(httpx.AsyncClient(transport=upstream.transport()))

        await proxy.forward("HEAD", MEDIA, {})

        assert seen[0]["read"] is None
        assert seen[0]["connect"] == 10.0
