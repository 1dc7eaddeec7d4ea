"""FastAPI application factory."""

import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from edge_api.api.dependencies import GatewayServices
from edge_api.api.errors import register_exception_handlers
from edge_api.api.routes import ROUTERS
from edge_api.cache.store import MemoryResponseCache, ResponseCacheBackend, ResponseCacheFacade
from edge_api.fetch.client import UpstreamFetcher
from edge_api.observability.logging import bind_request_context, clear_request_context
from edge_api.proxy.bridge import BridgeClient
from edge_api.proxy.stream import RangeProxy
from edge_api.settings.app import AppSettings, get_settings


logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def build_services(
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
    cache_backend: ResponseCacheBackend | None = None,
) -> GatewayServices:
    """Wire the shared client and the components that use it.

    Args:
        settings: Effective configuration.
        transport: Optional httpx transport, used by tests to fake upstreams.
        cache_backend: Optional cache backend (default: in-memory).

    Returns:
        Services container for the application.
    """
    client = httpx.AsyncClient(transport=transport, follow_redirects=True)
    proxy = RangeProxy(client)
    backend = cache_backend or MemoryResponseCache(settings.cache_max_entries)
    return GatewayServices(
        settings=settings,
        client=client,
        fetcher=UpstreamFetcher(client, user_agent=settings.user_agent),
        cache=ResponseCacheFacade(backend),
        proxy=proxy,
        bridge=BridgeClient(
            client,
            proxy,
            base_url=settings.bridge_base,
            token=settings.bridge_token,
        ),
    )


def create_app(
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    cache_backend: ResponseCacheBackend | None = None,
) -> FastAPI:
    """Create the gateway application.

    Args:
        settings: Configuration (default: read from the environment).
        transport: Optional httpx transport for all outbound requests.
        cache_backend: Optional response cache backend.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()
    services = build_services(settings, transport=transport, cache_backend=cache_backend)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "gateway_started",
            bridge_configured=services.bridge.configured,
            allowed_video_hosts=list(settings.allowed_video_hosts),
        )
        try:
            yield
        finally:
            await services.client.aclose()
            logger.info("gateway_stopped")

    app = FastAPI(
        title="Edge API",
        description="Edge gateway for third-party data and media streams",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.services = services

    register_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.middleware("http")
    async def request_context(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        bind_request_context(request_id, request.method, request.url.path)
        start_ns = time.perf_counter_ns()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
            )
            return response
        finally:
            clear_request_context()

    return app
