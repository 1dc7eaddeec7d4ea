"""Header and URL redaction for log output."""

import re
from collections.abc import Mapping


# Headers whose values never reach the logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
        "proxy-authorization",
        "set-cookie",
    }
)

REDACTED_VALUE = "[REDACTED]"

_URL_CREDENTIALS_RE = re.compile(r"(https?://)([^:/@]+):([^@/]+)@")


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    Args:
        headers: Original headers mapping.

    Returns:
        New dictionary with sensitive values replaced by [REDACTED].
    """
    return {
        key: REDACTED_VALUE if is_sensitive_header(key) else value
        for key, value in headers.items()
    }


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive."""
    return header_name.lower() in SENSITIVE_HEADERS


def redact_url_credentials(url: str) -> str:
    """Redact user:password credentials embedded in a URL.

    Media URLs are client-supplied and may carry basic-auth credentials.

    Args:
        url: URL that may contain credentials.

    Returns:
        URL with credentials redacted.
    """
    return _URL_CREDENTIALS_RE.sub(r"\1[REDACTED]:[REDACTED]@", url)


def redact_secret(value: str | None) -> str | None:
    """Mask a configured secret, keeping only whether it is set."""
    if not value:
        return value
    return REDACTED_VALUE
