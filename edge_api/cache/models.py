"""Data models for the response cache."""

from datetime import UTC, datetime, timedelta
from typing import Annotated
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field


class CachedResponse(BaseModel):
    """A complete response as it was sent to the client.

    Replaying it must be byte-identical to the original response, so the
    header list keeps its order and duplicates.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: Annotated[int, Field(ge=100, le=599)] = 200
    headers: tuple[tuple[str, str], ...] = Field(
        default=(), description="Response headers in send order"
    )
    body: bytes = Field(default=b"", description="Exact response body")
    stored_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    ttl_seconds: Annotated[int, Field(ge=0)] = 0

    @property
    def expires_at(self) -> datetime:
        """Get the instant after which the entry must not be served."""
        return self.stored_at + timedelta(seconds=self.ttl_seconds)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the entry outlived its TTL.

        Args:
            now: Reference instant (default: current UTC time).

        Returns:
            True if the entry is expired.
        """
        reference = now or datetime.now(UTC)
        return reference >= self.expires_at

    def header(self, name: str) -> str | None:
        """Look up the first header with a name, case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


def cache_key_for_url(url: str) -> str:
    """Build the cache key for a request URL.

    Keeps scheme, host, path and query (in the order the client sent it)
    and drops the fragment. Scheme and host are lower-cased.

    Args:
        url: Full request URL.

    Returns:
        Canonical cache key.
    """
    parts = urlsplit(url)
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, "")
    )
