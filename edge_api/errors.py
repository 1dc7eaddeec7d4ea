"""Error types surfaced to gateway clients."""

from typing import Any


class GatewayError(Exception):
    """Base exception for errors returned to the client.

    Carries the HTTP status and the JSON body to render. Subclasses fix
    the status code for each failure category.
    """

    status_code: int = 500
    plain_text: bool = False

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cors: bool = False,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the gateway error.

        Args:
            message: Human-readable error message, rendered as `error`.
            details: Extra fields merged into the JSON body.
            cors: Whether the response needs the permissive CORS header.
            headers: Extra response headers.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cors = cors
        self.headers = headers or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to its JSON body.

        Returns:
            Dictionary with `error` plus any details.
        """
        return {"error": self.message, **self.details}


class ClientInputError(GatewayError):
    """Missing, malformed or conflicting request parameters."""

    status_code = 400


class HostNotAllowedError(GatewayError):
    """Proxy target host is outside the configured allow-list."""

    status_code = 403


class MethodNotAllowedError(GatewayError):
    """HTTP method not supported by the route; rendered as plain text."""

    status_code = 405
    plain_text = True

    def __init__(self, allowed: tuple[str, ...]) -> None:
        """Initialize the error.

        Args:
            allowed: Methods the route accepts, for the Allow header.
        """
        super().__init__("Method Not Allowed", headers={"Allow": ", ".join(allowed)})
        self.allowed = allowed


class NotConfiguredError(GatewayError):
    """Required external configuration is absent."""

    status_code = 501

    def __init__(self, missing: list[str]) -> None:
        """Initialize the error.

        Args:
            missing: Names of the missing settings.
        """
        super().__init__("Bridge not configured", details={"missing": missing}, cors=True)
        self.missing = missing


class UpstreamRejectedError(GatewayError):
    """A provider answered with a definitive, non-retryable error."""

    status_code = 502


class UpstreamUnavailableError(GatewayError):
    """The upstream could not be reached at all."""

    status_code = 502


class AllProvidersFailedError(GatewayError):
    """Every provider in a fallback chain failed transiently."""

    status_code = 504
