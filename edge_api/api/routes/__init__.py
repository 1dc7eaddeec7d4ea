"""HTTP routers."""

from edge_api.api.routes import camera, data, media, rates, status, weather


ROUTERS = (
    status.router,
    data.router,
    weather.router,
    rates.router,
    media.router,
    camera.router,
)

__all__ = ["ROUTERS"]
