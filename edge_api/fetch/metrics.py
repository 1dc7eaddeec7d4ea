"""Metrics collection for upstream fetches, caching and proxying."""

from dataclasses import dataclass, field
from typing import ClassVar

from edge_api.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for the gateway's outbound traffic.

    Singleton class that tracks upstream request counts, provider chain
    outcomes, response cache activity and proxied streams.
    """

    upstream_requests_total: dict[int, int] = field(default_factory=dict)
    upstream_failures_total: dict[str, int] = field(default_factory=dict)
    upstream_duration_ms_total: float = 0.0
    upstream_request_count: int = 0
    chain_success_total: dict[str, int] = field(default_factory=dict)
    chain_fallback_total: int = 0
    chain_rejected_total: int = 0
    chain_exhausted_total: int = 0
    cache_hits_total: int = 0
    cache_misses_total: int = 0
    cache_store_failures_total: int = 0
    proxy_streams_total: int = 0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int, duration_ms: float) -> None:
        """Record a completed upstream request.

        Args:
            status_code: HTTP status code, 0 for network failures.
            duration_ms: Time spent on the request.
        """
        self.upstream_requests_total[status_code] = (
            self.upstream_requests_total.get(status_code, 0) + 1
        )
        self.upstream_duration_ms_total += duration_ms
        self.upstream_request_count += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record an upstream failure.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.upstream_failures_total[key] = self.upstream_failures_total.get(key, 0) + 1

    def record_chain_success(self, provider: str) -> None:
        """Record a chain resolved by a provider."""
        self.chain_success_total[provider] = self.chain_success_total.get(provider, 0) + 1

    def record_fallback(self) -> None:
        """Record a chain advancing past a failed provider."""
        self.chain_fallback_total += 1

    def record_rejected(self) -> None:
        """Record a chain ended by a non-retryable upstream status."""
        self.chain_rejected_total += 1

    def record_exhausted(self) -> None:
        """Record a chain where every provider failed."""
        self.chain_exhausted_total += 1

    def record_cache_hit(self) -> None:
        self.cache_hits_total += 1

    def record_cache_miss(self) -> None:
        self.cache_misses_total += 1

    def record_cache_store_failure(self) -> None:
        self.cache_store_failures_total += 1

    def record_proxy_stream(self) -> None:
        self.proxy_streams_total += 1

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average upstream request duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.upstream_request_count == 0:
            return 0.0
        return self.upstream_duration_ms_total / self.upstream_request_count

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "upstream_requests_total": {
                str(status): count
                for status, count in self.upstream_requests_total.items()
            },
            "upstream_failures_total": dict(self.upstream_failures_total),
            "upstream_request_count": self.upstream_request_count,
            "upstream_avg_duration_ms": round(self.avg_duration_ms, 2),
            "chain_success_total": dict(self.chain_success_total),
            "chain_fallback_total": self.chain_fallback_total,
            "chain_rejected_total": self.chain_rejected_total,
            "chain_exhausted_total": self.chain_exhausted_total,
            "cache_hits_total": self.cache_hits_total,
            "cache_misses_total": self.cache_misses_total,
            "cache_store_failures_total": self.cache_store_failures_total,
            "proxy_streams_total": self.proxy_streams_total,
        }
