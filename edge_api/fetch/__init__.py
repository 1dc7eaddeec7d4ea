"""Upstream fetch layer.

This module provides bounded outbound requests with:
- Absolute deadlines shared across several requests
- Status and transport error classification
- Header redaction for logging
- Metrics collection for observability
"""

from edge_api.fetch.client import UpstreamFetcher
from edge_api.fetch.metrics import FetchMetrics
from edge_api.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    classify_status,
)
from edge_api.fetch.redact import redact_headers, redact_url_credentials


__all__ = [
    # Client
    "UpstreamFetcher",
    # Models
    "FetchError",
    "FetchErrorClass",
    "FetchResult",
    "classify_status",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
