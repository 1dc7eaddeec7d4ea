"""Unit tests for the deadline-bounded upstream fetcher."""

import asyncio

import httpx
import pytest

from edge_api.fetch.client import UpstreamFetcher
from edge_api.fetch.metrics import FetchMetrics
from edge_api.fetch.models import FetchErrorClass
from tests.helpers.upstream import FakeUpstream, json_reply


URL = "https://api.example.test/v1/thing"


def make_fetcher(upstream: FakeUpstream, user_agent: str = "edge-api/test") -> UpstreamFetcher:
    client = httpx.AsyncClient(transport=upstream.transport())
    return UpstreamFetcher(client, user_agent=user_agent)


class TestUpstreamFetcher:
    """Tests for UpstreamFetcher.fetch."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        FetchMetrics.reset()

    @pytest.mark.asyncio
    async def test_successful_fetch(self) -> None:
        """Test that a 2xx response is returned without error."""
        upstream = FakeUpstream()
        upstream.add(URL, json_reply(200, {"ok": True}))
        fetcher = make_fetcher(upstream)

        result = await fetcher.fetch(URL)

        assert result.is_success
        assert result.decode_json() == {"ok": True}
        assert FetchMetrics.get_instance().upstream_requests_total == {200: 1}

    @pytest.mark.asyncio
    async def test_sends_user_agent_and_accept(self) -> None:
        """Test that default headers reach the provider."""
        upstream = FakeUpstream()
        upstream.add(URL, json_reply(200, {}))
        fetcher = make_fetcher(upstream, user_agent="edge-api/9.9")

        await fetcher.fetch(URL, extra_headers={"X-Extra": "1"})

        sent = upstream.calls(URL)[0].headers
        assert sent["user-agent"] == "edge-api/9.9"
        assert sent["accept"] == "application/json"
        assert sent["x-extra"] == "1"

    @pytest.mark.asyncio
    async def test_http_error_status_is_classified(self) -> None:
        """Test that a 503 comes back as a transient HTTP_5XX result."""
        upstream = FakeUpstream()
        upstream.add(URL, json_reply(503, {"error": "down"}))
        fetcher = make_fetcher(upstream)

        result = await fetcher.fetch(URL)

        assert result.status_code == 503
        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.HTTP_5XX
        assert FetchMetrics.get_instance().upstream_failures_total == {"HTTP_5XX": 1}

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Test that transport failures become CONNECTION_ERROR."""
        upstream = FakeUpstream()
        upstream.add(URL, httpx.ConnectError("connection refused"))
        fetcher = make_fetcher(upstream)

        result = await fetcher.fetch(URL)

        assert result.status_code == 0
        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.CONNECTION_ERROR

    @pytest.mark.asyncio
    async def test_httpx_timeout(self) -> None:
        """Test that httpx timeouts become NETWORK_TIMEOUT."""
        upstream = FakeUpstream()
        upstream.add(URL, httpx.ReadTimeout("read timed out"))
        fetcher = make_fetcher(upstream)

        result = await fetcher.fetch(URL)

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.NETWORK_TIMEOUT

    @pytest.mark.asyncio
    async def test_deadline_cancels_slow_request(self) -> None:
        """Test that a request outliving its deadline is abandoned."""

        async def slow(_request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        upstream = FakeUpstream()
        upstream.add(URL, slow)
        fetcher = make_fetcher(upstream)

        result = await fetcher.fetch(URL, deadline=fetcher.deadline_after(0.05))

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.NETWORK_TIMEOUT
        assert result.duration_ms < 5000

    @pytest.mark.asyncio
    async def test_past_deadline_fails_without_request(self) -> None:
        """Test that an expired deadline fails before contacting the provider."""
        upstream = FakeUpstream()
        upstream.add(URL, json_reply(200, {}))
        fetcher = make_fetcher(upstream)

        result = await fetcher.fetch(URL, deadline=fetcher.deadline_after(-1))

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.NETWORK_TIMEOUT
        assert upstream.requests == []
