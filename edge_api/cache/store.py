"""Response cache backends and the read-through/write-behind facade."""

from collections import OrderedDict
from datetime import UTC, datetime
from typing import Protocol

import structlog

from edge_api.cache.models import CachedResponse
from edge_api.fetch.metrics import FetchMetrics


logger = structlog.get_logger()

DEFAULT_MAX_ENTRIES = 1024


class ResponseCacheBackend(Protocol):
    """Protocol for response cache storage.

    Backends are treated as opaque key-value services. Nothing stronger
    than eventual visibility of a set() to later get() calls is assumed.
    """

    async def get(self, key: str) -> CachedResponse | None:
        """Retrieve a stored response.

        Args:
            key: Canonical request URL.

        Returns:
            The stored response, or None if absent.
        """
        ...

    async def set(self, key: str, entry: CachedResponse) -> None:
        """Store a response under a key, replacing any previous entry.

        Args:
            key: Canonical request URL.
            entry: Response to store, carrying its own TTL.
        """
        ...


class MemoryResponseCache:
    """Process-local response cache with per-entry expiry.

    Entries are kept in insertion order; when the bound is reached the
    oldest entry is evicted first.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of stored responses.
        """
        if max_entries < 1:
            msg = f"max_entries must be positive, got {max_entries}"
            raise ValueError(msg)
        self._max_entries = max_entries
        self._entries: OrderedDict[str, CachedResponse] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> CachedResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(datetime.now(UTC)):
            del self._entries[key]
            return None
        return entry

    async def set(self, key: str, entry: CachedResponse) -> None:
        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()


class ResponseCacheFacade:
    """Read-through, write-behind access to a response cache backend.

    - lookup() runs before any upstream call; a hit is served as-is
      without revalidation
    - store() runs after the response is sent and never fails the caller
    """

    def __init__(self, backend: ResponseCacheBackend) -> None:
        """Initialize the facade.

        Args:
            backend: Storage backend for responses.
        """
        self._backend = backend
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="cache")

    async def lookup(self, key: str) -> CachedResponse | None:
        """Look up a fresh response for a request.

        Args:
            key: Canonical request URL.

        Returns:
            The cached response, or None on a miss or expired entry.
        """
        entry = await self._backend.get(key)
        if entry is None or entry.is_expired():
            self._metrics.record_cache_miss()
            self._log.debug("cache_miss", key=key)
            return None

        self._metrics.record_cache_hit()
        self._log.debug("cache_hit", key=key, stored_at=entry.stored_at.isoformat())
        return entry

    async def store(
        self,
        key: str,
        status_code: int,
        headers: list[tuple[str, str]],
        body: bytes,
        ttl_seconds: int,
    ) -> None:
        """Store a response that was just sent to a client.

        Backend failures are logged and dropped.

        Args:
            key: Canonical request URL.
            status_code: Status sent to the client.
            headers: Headers sent to the client, in order.
            body: Exact body bytes sent to the client.
            ttl_seconds: Lifetime of the entry.
        """
        entry = CachedResponse(
            status_code=status_code,
            headers=tuple(headers),
            body=body,
            ttl_seconds=ttl_seconds,
        )
        try:
            await self._backend.set(key, entry)
        except Exception as e:  # noqa: BLE001
            self._metrics.record_cache_store_failure()
            self._log.warning("cache_store_failed", key=key, error=str(e))
            return

        self._log.debug("cache_store", key=key, ttl_seconds=ttl_seconds, bytes=len(body))
