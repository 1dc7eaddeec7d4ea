"""Data models for the upstream fetch layer."""

import json
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from edge_api.fetch.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)


class FetchErrorClass(str, Enum):
    """Classification of upstream fetch errors.

    - NETWORK_TIMEOUT: Request hit the deadline or was cancelled
    - CONNECTION_ERROR: Could not establish or keep a connection
    - FORBIDDEN: 403, usually a provider-side block
    - RATE_LIMITED: 429 Too Many Requests
    - HTTP_4XX: Definitive client error from the provider
    - HTTP_5XX: Provider-side server error
    - INVALID_PAYLOAD: 2xx response whose body could not be used
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    UNKNOWN = "UNKNOWN"

    @property
    def is_transient(self) -> bool:
        """Whether a provider chain should move on to the next provider."""
        return self is not FetchErrorClass.HTTP_4XX


class FetchError(BaseModel):
    """Typed error from a single upstream attempt."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    status_code: int | None = Field(
        default=None, description="HTTP status code if available"
    )

    @property
    def is_transient(self) -> bool:
        """Check if the error allows trying another provider."""
        return self.error_class.is_transient


class FetchResult(BaseModel):
    """Result of one upstream request.

    Network failures carry status_code 0 and an error.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=0, le=599, description="HTTP status code")
    url: Annotated[str, Field(min_length=1, description="Requested URL")]
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")
    duration_ms: float = Field(default=0.0, ge=0.0)
    error: FetchError | None = Field(
        default=None, description="Error details if the fetch failed"
    )

    @property
    def is_success(self) -> bool:
        """Check if the fetch was successful (2xx status, no error)."""
        return (
            self.error is None
            and HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX
        )

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body_bytes)

    def decode_json(self) -> Any:  # noqa: ANN401
        """Decode the body as JSON.

        Returns:
            The decoded document.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body_bytes)


def classify_status(status_code: int) -> FetchError | None:
    """Classify an HTTP status code.

    Args:
        status_code: Upstream HTTP status code.

    Returns:
        FetchError for non-2xx statuses, None for success.
    """
    if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
        return None

    if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
        return FetchError(
            error_class=FetchErrorClass.RATE_LIMITED,
            message="Rate limited (429 Too Many Requests)",
            status_code=status_code,
        )

    if status_code == HTTP_STATUS_FORBIDDEN:
        return FetchError(
            error_class=FetchErrorClass.FORBIDDEN,
            message="Forbidden (403)",
            status_code=status_code,
        )

    if status_code >= HTTP_STATUS_SERVER_ERROR_MIN:
        return FetchError(
            error_class=FetchErrorClass.HTTP_5XX,
            message=f"Server error ({status_code})",
            status_code=status_code,
        )

    label = "Client error" if status_code >= HTTP_STATUS_BAD_REQUEST else "Unexpected status"
    return FetchError(
        error_class=FetchErrorClass.HTTP_4XX,
        message=f"{label} ({status_code})",
        status_code=status_code,
    )
