"""Provider fallback chains for the JSON aggregation endpoints."""

from edge_api.providers.catalog import data_chain, rates_chain, weather_now_chain
from edge_api.providers.chain import FallbackChain
from edge_api.providers.models import (
    AllFailed,
    FallbackOutcome,
    ProviderAttempt,
    ProviderSpec,
    Success,
    UpstreamRejected,
)


__all__ = [
    "AllFailed",
    "FallbackChain",
    "FallbackOutcome",
    "ProviderAttempt",
    "ProviderSpec",
    "Success",
    "UpstreamRejected",
    "data_chain",
    "rates_chain",
    "weather_now_chain",
]
