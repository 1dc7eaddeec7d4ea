"""Transforms for exchange-rate providers."""

from collections.abc import Sequence
from email.utils import parsedate_to_datetime
from typing import Any

from edge_api.transforms.models import ExchangeRates


def frankfurter_rates(document: dict[str, Any]) -> ExchangeRates:
    """Normalize a Frankfurter /latest document.

    Frankfurter already filters by the requested symbols.
    """
    return ExchangeRates(
        base=document["base"],
        date=document.get("date"),
        rates=document.get("rates") or {},
    )


def open_er_api_rates(
    document: dict[str, Any],
    symbols: Sequence[str] = (),
) -> ExchangeRates:
    """Normalize an open.er-api.com /latest document.

    The provider always returns every currency, so rates are filtered to
    the requested symbols here. The base currency itself is dropped from
    a filtered result, matching Frankfurter.

    Args:
        document: Decoded provider response.
        symbols: Requested currency codes; empty keeps all.

    Returns:
        Normalized exchange rates.
    """
    if document.get("result") not in (None, "success"):
        msg = f"Provider reported result={document.get('result')!r}"
        raise ValueError(msg)

    base = document["base_code"]
    rates: dict[str, int | float] = document.get("rates") or {}
    if symbols:
        rates = {code: rates[code] for code in symbols if code in rates and code != base}

    updated = document.get("time_last_update_utc")
    return ExchangeRates(base=base, date=_rfc2822_to_date(updated), rates=rates)


def _rfc2822_to_date(value: str | None) -> str | None:
    """Convert 'Fri, 02 Aug 2024 00:02:31 +0000' to '2024-08-02'."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(value).date().isoformat()
    except (TypeError, ValueError):
        return None
