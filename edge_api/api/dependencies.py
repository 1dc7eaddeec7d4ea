"""Shared per-application services and their FastAPI dependency."""

from dataclasses import dataclass

import httpx
from fastapi import Request

from edge_api.cache.store import ResponseCacheFacade
from edge_api.fetch.client import UpstreamFetcher
from edge_api.proxy.bridge import BridgeClient
from edge_api.proxy.stream import RangeProxy
from edge_api.settings.app import AppSettings


@dataclass(frozen=True)
class GatewayServices:
    """Everything a route needs, built once per application.

    Attributes:
        settings: Effective configuration.
        client: Shared outbound HTTP client.
        fetcher: Deadline-bounded JSON fetcher.
        cache: Response cache facade.
        proxy: Range-preserving stream proxy.
        bridge: Camera bridge client.
    """

    settings: AppSettings
    client: httpx.AsyncClient
    fetcher: UpstreamFetcher
    cache: ResponseCacheFacade
    proxy: RangeProxy
    bridge: BridgeClient


def get_services(request: Request) -> GatewayServices:
    """Return the services attached to the running application."""
    services: GatewayServices = request.app.state.services
    return services
