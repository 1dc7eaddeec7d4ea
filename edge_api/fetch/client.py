"""Deadline-bounded upstream HTTP client."""

import asyncio
import time
from collections.abc import Mapping
from urllib.parse import urlparse

import httpx
import structlog

from edge_api.fetch.constants import DEFAULT_USER_AGENT
from edge_api.fetch.metrics import FetchMetrics
from edge_api.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    classify_status,
)
from edge_api.fetch.redact import redact_url_credentials


logger = structlog.get_logger()


class UpstreamFetcher:
    """Issues single GET requests to upstream providers.

    Every request is bounded by an absolute deadline on the event loop
    clock. Failures never raise; they come back as a FetchResult carrying
    a classified FetchError so callers can decide whether to try another
    provider:
    - Deadline or httpx timeout -> NETWORK_TIMEOUT
    - Transport failure -> CONNECTION_ERROR
    - Non-2xx status -> classified by status code
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Shared async HTTP client.
            user_agent: User-Agent sent to every provider.
        """
        self._client = client
        self._user_agent = user_agent
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    def deadline_after(self, timeout_seconds: float) -> float:
        """Compute an absolute deadline on the running loop's clock.

        Args:
            timeout_seconds: Seconds from now.

        Returns:
            Loop time at which requests must be abandoned.
        """
        return asyncio.get_running_loop().time() + timeout_seconds

    async def fetch(
        self,
        url: str,
        deadline: float | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> FetchResult:
        """Fetch a URL once, bounded by a deadline.

        Args:
            url: Upstream URL.
            deadline: Absolute loop time, or None for no deadline.
            extra_headers: Additional request headers.

        Returns:
            FetchResult with status, body and error classification.
        """
        headers = self._build_headers(extra_headers)
        log = self._log.bind(
            url=redact_url_credentials(url),
            domain=urlparse(url).netloc,
        )
        start_ns = time.perf_counter_ns()

        if deadline is not None and asyncio.get_running_loop().time() >= deadline:
            result = self._failure(
                url, start_ns, FetchErrorClass.NETWORK_TIMEOUT, "Deadline already passed"
            )
        else:
            result = await self._send(url, headers, deadline, start_ns)

        self._metrics.record_request(result.status_code, result.duration_ms)
        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)

        log.debug(
            "upstream_fetch",
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(result.duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    async def _send(
        self,
        url: str,
        headers: dict[str, str],
        deadline: float | None,
        start_ns: int,
    ) -> FetchResult:
        try:
            async with asyncio.timeout_at(deadline):
                response = await self._client.get(url, headers=headers)
        except TimeoutError:
            result = self._failure(
                url, start_ns, FetchErrorClass.NETWORK_TIMEOUT, "Deadline exceeded"
            )
        except httpx.TimeoutException as e:
            result = self._failure(
                url, start_ns, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            )
        except httpx.TransportError as e:
            result = self._failure(
                url, start_ns, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            )
        except httpx.HTTPError as e:
            result = self._failure(
                url, start_ns, FetchErrorClass.UNKNOWN, f"Unexpected error: {e}"
            )
        else:
            result = FetchResult(
                status_code=response.status_code,
                url=url,
                headers=dict(response.headers),
                body_bytes=response.content,
                duration_ms=self._elapsed_ms(start_ns),
                error=classify_status(response.status_code),
            )
        return result

    def _build_headers(self, extra_headers: Mapping[str, str] | None) -> dict[str, str]:
        headers: dict[str, str] = {
            "User-Agent": self._user_agent,
            "Accept": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _failure(
        self,
        url: str,
        start_ns: int,
        error_class: FetchErrorClass,
        message: str,
    ) -> FetchResult:
        return FetchResult(
            status_code=0,
            url=url,
            duration_ms=self._elapsed_ms(start_ns),
            error=FetchError(error_class=error_class, message=message),
        )

    @staticmethod
    def _elapsed_ms(start_ns: int) -> float:
        return (time.perf_counter_ns() - start_ns) / 1_000_000
