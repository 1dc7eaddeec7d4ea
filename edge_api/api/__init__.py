"""HTTP surface: FastAPI application factory, routers and error handlers."""

from edge_api.api.app import build_services, create_app
from edge_api.api.dependencies import GatewayServices, get_services


__all__ = ["GatewayServices", "build_services", "create_app", "get_services"]
