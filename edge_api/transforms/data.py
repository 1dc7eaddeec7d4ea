"""Transforms for the generic /data providers."""

from typing import Any


def coingecko_price(document: Any) -> Any:  # noqa: ANN401
    """CoinGecko simple-price documents are already the payload."""
    return document


def chucknorris_joke(document: dict[str, Any]) -> dict[str, Any]:
    """Reduce a Chuck Norris API document to the joke text."""
    return {"joke": document.get("value")}
