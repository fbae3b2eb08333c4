"""
Coinbase spot price source (public, unauthenticated).

  GET https://api.coinbase.com/v2/prices/{SYM}-USD/spot
"""

from __future__ import annotations

from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

COINBASE_PRICES_URL = "https://api.coinbase.com/v2/prices"
HTTP_TIMEOUT_S = 8.0

# Coinbase lists MATIC under its POL ticker
COINBASE_ASSETS = {"MATIC": "POL"}


class CoinbaseSpotProvider:
    """USD spot price from the Coinbase prices endpoint."""

    @property
    def provider_name(self) -> str:
        return "coinbase"

    def get_spot(self, symbol: str) -> SpotQuote:
        sym = symbol.upper()
        url = f"{COINBASE_PRICES_URL}/{COINBASE_ASSETS.get(sym, sym)}-USD/spot"
        payload = get_json(url, timeout=HTTP_TIMEOUT_S)
        data = payload.get("data") if isinstance(payload, dict) else None
        amount = to_float(data.get("amount")) if isinstance(data, dict) else None
        if amount is None:
            raise ProviderUnavailable(url, "response missing data.amount")
        return make_quote(sym, amount, self.provider_name)
