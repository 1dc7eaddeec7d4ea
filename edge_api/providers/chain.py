"""Sequential multi-provider fallback for one logical endpoint."""

from collections.abc import Sequence

import structlog

from edge_api.fetch.client import UpstreamFetcher
from edge_api.fetch.metrics import FetchMetrics
from edge_api.fetch.models import FetchErrorClass
from edge_api.providers.models import (
    AllFailed,
    FallbackOutcome,
    ProviderAttempt,
    ProviderSpec,
    Success,
    UpstreamRejected,
)


logger = structlog.get_logger()


class FallbackChain:
    """Tries interchangeable providers one at a time until one succeeds.

    All attempts share a single deadline computed when the chain starts;
    it is not reset between providers, so a slow provider eats into the
    time left for the ones after it. Once the deadline has passed every
    remaining provider fails immediately with a timeout.

    Outcome per attempt:
    - Network error, timeout, 403, 429 or 5xx -> next provider
    - Any other non-2xx -> stop with UpstreamRejected
    - 2xx -> decode JSON, transform, stop with Success
    - 2xx with an unusable body -> next provider
    """

    def __init__(
        self,
        name: str,
        providers: Sequence[ProviderSpec],
        timeout_seconds: float,
    ) -> None:
        """Initialize the chain.

        Args:
            name: Logical endpoint name for logging.
            providers: Providers in priority order.
            timeout_seconds: Deadline for the whole chain.
        """
        if not providers:
            msg = f"Chain '{name}' needs at least one provider"
            raise ValueError(msg)
        self._name = name
        self._providers = tuple(providers)
        self._timeout_seconds = timeout_seconds
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="chain", chain=name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def providers(self) -> tuple[ProviderSpec, ...]:
        return self._providers

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def run(self, fetcher: UpstreamFetcher) -> FallbackOutcome:
        """Resolve the chain.

        Args:
            fetcher: Upstream fetcher used for every attempt.

        Returns:
            Success, UpstreamRejected or AllFailed.
        """
        deadline = fetcher.deadline_after(self._timeout_seconds)
        attempts: list[ProviderAttempt] = []

        for index, provider in enumerate(self._providers):
            if index > 0:
                self._metrics.record_fallback()

            result = await fetcher.fetch(provider.url, deadline=deadline)

            if result.error is not None:
                attempts.append(
                    ProviderAttempt(
                        provider=provider.name,
                        error_class=result.error.error_class,
                        status_code=result.error.status_code,
                    )
                )
                self._log.info(
                    "provider_attempt",
                    provider=provider.name,
                    status_code=result.status_code,
                    error_class=result.error.error_class.value,
                    transient=result.error.is_transient,
                )
                if result.error.is_transient:
                    continue

                self._metrics.record_rejected()
                return UpstreamRejected(
                    status_code=result.status_code,
                    provider=provider.name,
                    attempts=tuple(attempts),
                )

            try:
                payload = provider.transform(result.decode_json())
            except (ValueError, TypeError, KeyError, AttributeError, IndexError) as e:
                attempts.append(
                    ProviderAttempt(
                        provider=provider.name,
                        error_class=FetchErrorClass.INVALID_PAYLOAD,
                        status_code=result.status_code,
                    )
                )
                self._metrics.record_failure(FetchErrorClass.INVALID_PAYLOAD)
                self._log.info(
                    "provider_attempt",
                    provider=provider.name,
                    status_code=result.status_code,
                    error_class=FetchErrorClass.INVALID_PAYLOAD.value,
                    transient=True,
                    error=str(e),
                )
                continue

            self._metrics.record_chain_success(provider.name)
            self._log.info(
                "chain_resolved",
                provider=provider.name,
                failed_attempts=len(attempts),
            )
            return Success(payload=payload, provider=provider.name, attempts=tuple(attempts))

        self._metrics.record_exhausted()
        self._log.warning(
            "chain_exhausted",
            attempts=[a.provider for a in attempts],
        )
        return AllFailed(attempts=tuple(attempts))
