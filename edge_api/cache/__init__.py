"""Short-lived response cache keyed by canonical request URL."""

from edge_api.cache.models import CachedResponse, cache_key_for_url
from edge_api.cache.store import (
    MemoryResponseCache,
    ResponseCacheBackend,
    ResponseCacheFacade,
)


__all__ = [
    "CachedResponse",
    "MemoryResponseCache",
    "ResponseCacheBackend",
    "ResponseCacheFacade",
    "cache_key_for_url",
]
