"""Unit tests for the provider fallback chain."""

import asyncio

import httpx
import pytest

from edge_api.fetch.client import UpstreamFetcher
from edge_api.fetch.metrics import FetchMetrics
from edge_api.fetch.models import FetchErrorClass
from edge_api.providers.chain import FallbackChain
from edge_api.providers.models import AllFailed, ProviderSpec, Success, UpstreamRejected
from tests.helpers.upstream import FakeUpstream, json_reply


FIRST = "https://first.example.test/api"
SECOND = "https://second.example.test/api"


def chain(timeout_seconds: float = 4.5) -> FallbackChain:
    return FallbackChain(
        name="test",
        providers=[
            ProviderSpec(name="first", url=FIRST, transform=lambda doc: {"from": "first", **doc}),
            ProviderSpec(name="second", url=SECOND, transform=lambda doc: {"from": "second", **doc}),
        ],
        timeout_seconds=timeout_seconds,
    )


def fetcher_for(upstream: FakeUpstream) -> UpstreamFetcher:
    return UpstreamFetcher(httpx.AsyncClient(transport=upstream.transport()))


class TestFallbackChain:
    """Tests for FallbackChain.run."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        FetchMetrics.reset()

    def test_requires_providers(self) -> None:
        """Test that an empty chain is rejected."""
        with pytest.raises(ValueError):
            FallbackChain(name="empty", providers=[], timeout_seconds=1.0)

    @pytest.mark.asyncio
    async def test_first_provider_wins(self) -> None:
        """Test that a healthy first provider resolves the chain alone."""
        upstream = FakeUpstream()
        upstream.add(FIRST, json_reply(200, {"v": 1}))
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, Success)
        assert outcome.provider == "first"
        assert outcome.payload == {"from": "first", "v": 1}
        assert upstream.calls(SECOND) == []

    @pytest.mark.asyncio
    async def test_rate_limited_falls_back(self) -> None:
        """Test that a 429 moves on and the second provider's payload is returned."""
        upstream = FakeUpstream()
        upstream.add(FIRST, json_reply(429, {"error": "slow down"}))
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, Success)
        assert outcome.provider == "second"
        assert outcome.payload == {"from": "second", "v": 2}
        assert [a.error_class for a in outcome.attempts] == [FetchErrorClass.RATE_LIMITED]
        assert FetchMetrics.get_instance().chain_fallback_total == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [403, 500, 503])
    async def test_transient_statuses_fall_back(self, status: int) -> None:
        """Test that 403 and 5xx are retried on the next provider."""
        upstream = FakeUpstream()
        upstream.add(FIRST, json_reply(status, {}))
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, Success)
        assert outcome.provider == "second"

    @pytest.mark.asyncio
    async def test_all_server_errors_exhaust_chain(self) -> None:
        """Test that every provider failing with 500 yields AllFailed."""
        upstream = FakeUpstream()
        upstream.add(FIRST, json_reply(500, {}))
        upstream.add(SECOND, json_reply(500, {}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, AllFailed)
        assert [a.provider for a in outcome.attempts] == ["first", "second"]
        assert len(upstream.calls(FIRST)) == 1
        assert len(upstream.calls(SECOND)) == 1
        assert FetchMetrics.get_instance().chain_exhausted_total == 1

    @pytest.mark.asyncio
    async def test_client_error_is_terminal(self) -> None:
        """Test that a 404 stops the chain without calling the second provider."""
        upstream = FakeUpstream()
        upstream.add(FIRST, json_reply(404, {"error": "nope"}))
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, UpstreamRejected)
        assert outcome.status_code == 404
        assert outcome.provider == "first"
        assert upstream.calls(SECOND) == []

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self) -> None:
        """Test that connection failures are transient."""
        upstream = FakeUpstream()
        upstream.add(FIRST, httpx.ConnectError("refused"))
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, Success)
        assert outcome.attempts[0].error_class == FetchErrorClass.CONNECTION_ERROR

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back(self) -> None:
        """Test that a 2xx body that is not JSON counts as transient."""
        upstream = FakeUpstream()
        upstream.add(FIRST, httpx.Response(200, content=b"<html>blocked</html>"))
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain().run(fetcher_for(upstream))

        assert isinstance(outcome, Success)
        assert outcome.provider == "second"
        assert outcome.attempts[0].error_class == FetchErrorClass.INVALID_PAYLOAD

    @pytest.mark.asyncio
    async def test_deadline_is_shared_across_providers(self) -> None:
        """Test that a slow first provider consumes the whole chain budget."""

        async def slow(_request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        upstream = FakeUpstream()
        upstream.add(FIRST, slow)
        upstream.add(SECOND, json_reply(200, {"v": 2}))

        outcome = await chain(timeout_seconds=0.05).run(fetcher_for(upstream))

        assert isinstance(outcome, AllFailed)
        assert [a.error_class for a in outcome.attempts] == [
            FetchErrorClass.NETWORK_TIMEOUT,
            FetchErrorClass.NETWORK_TIMEOUT,
        ]
        assert upstream.calls(SECOND) == []
