"""Unit tests for the proxy header allow-lists."""

from edge_api.proxy.headers import forwarded_request_headers, relayed_response_headers


class TestForwardedRequestHeaders:
    """Tests for forwarded_request_headers."""

    def test_keeps_range_and_validators_only(self) -> None:
        """Test that only allow-listed request headers are forwarded."""
        incoming = {
            "range": "bytes=0-1023",
            "if-range": '"v1"',
            "if-none-match": '"v1"',
            "if-modified-since": "Wed, 21 Oct 2015 07:28:00 GMT",
            "cookie": "session=1",
            "authorization": "Bearer client",
            "x-forwarded-for": "10.0.0.1",
            "user-agent": "browser",
        }

        forwarded = forwarded_request_headers(incoming)

        assert forwarded == {
            "Range": "bytes=0-1023",
            "If-Range": '"v1"',
            "If-None-Match": '"v1"',
            "If-Modified-Since": "Wed, 21 Oct 2015 07:28:00 GMT",
        }

    def test_empty_values_dropped(self) -> None:
        """Test that blank headers are not forwarded."""
        assert forwarded_request_headers({"Range": ""}) == {}


class TestRelayedResponseHeaders:
    """Tests for relayed_response_headers."""

    def test_filters_and_adds_cors(self) -> None:
        """Test relay allow-list, CORS and hop-by-hop removal."""
        upstream = {
            "Content-Type": "video/mp4",
            "Content-Length": "1024",
            "Content-Range": "bytes 0-1023/4096",
            "Accept-Ranges": "bytes",
            "ETag": '"v1"',
            "Set-Cookie": "tracking=1",
            "Connection": "keep-alive",
            "Server": "origin",
        }

        relayed = relayed_response_headers(upstream)

        assert relayed == {
            "content-type": "video/mp4",
            "content-length": "1024",
            "content-range": "bytes 0-1023/4096",
            "accept-ranges": "bytes",
            "etag": '"v1"',
            "Access-Control-Allow-Origin": "*",
        }

    def test_synthesizes_accept_ranges(self) -> None:
        """Test that byte ranges are advertised when upstream is silent."""
        relayed = relayed_response_headers({"Content-Type": "video/mp4"})

        assert relayed["Accept-Ranges"] == "bytes"

    def test_keeps_upstream_accept_ranges(self) -> None:
        """Test that an explicit upstream value wins."""
        relayed = relayed_response_headers({"Accept-Ranges": "none"})

        assert relayed["accept-ranges"] == "none"
        assert "Accept-Ranges" not in relayed

    def test_location_only_when_requested(self) -> None:
        """Test that redirects are relayed for the media proxy only."""
        upstream = {"Location": "https://cdn.example.test/other.mp4"}

        assert "location" not in relayed_response_headers(upstream)
        assert (
            relayed_response_headers(upstream, relay_location=True)["location"]
            == "https://cdn.example.test/other.mp4"
        )
