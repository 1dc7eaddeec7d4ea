"""Provider specifications and fallback chain outcomes."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from edge_api.fetch.models import FetchErrorClass


# Maps a decoded provider document to the endpoint's normalized payload
Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class ProviderSpec:
    """One interchangeable upstream provider for a logical endpoint.

    Every provider in a chain must produce the same payload shape.

    Attributes:
        name: Provider name reported to clients.
        url: Fully built upstream URL.
        transform: Normalizes the provider's JSON document.
    """

    name: str
    url: str
    transform: Transform


@dataclass(frozen=True)
class ProviderAttempt:
    """Record of a failed provider attempt within a chain."""

    provider: str
    error_class: FetchErrorClass
    status_code: int | None = None


@dataclass(frozen=True)
class Success:
    """A provider returned a usable payload."""

    payload: Any
    provider: str
    attempts: tuple[ProviderAttempt, ...] = ()


@dataclass(frozen=True)
class UpstreamRejected:
    """A provider answered with a definitive, non-retryable status."""

    status_code: int
    provider: str
    attempts: tuple[ProviderAttempt, ...] = ()


@dataclass(frozen=True)
class AllFailed:
    """Every provider failed transiently."""

    attempts: tuple[ProviderAttempt, ...] = field(default_factory=tuple)


FallbackOutcome = Success | UpstreamRejected | AllFailed
