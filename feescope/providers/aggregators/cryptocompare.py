"""
CryptoCompare price source.

  GET https://min-api.cryptocompare.com/data/price?fsym={SYM}&tsyms=USD
"""
from __future__ import annotations

from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

CRYPTOCOMPARE_BASE_URL = "https://min-api.cryptocompare.com"
HTTP_TIMEOUT_S = 8.0


class CryptoComparePriceProvider:
    @property
    def provider_name(self) -> str:
        return "cryptocompare"

    def get_spot(self, symbol: str) -> SpotQuote:
        url = f"{CRYPTOCOMPARE_BASE_URL}/data/price"
        data = get_json(url, params={"fsym": symbol.upper(), "tsyms": "USD"}, timeout=HTTP_TIMEOUT_S)
        if isinstance(data, dict) and data.get("Response") == "Error":
            raise ProviderUnavailable(url, str(data.get("Message") or "error response"))
        price = to_float(data.get("USD")) if isinstance(data, dict) else None
        if price is None:
            raise ProviderUnavailable(url, "response missing USD")
        return make_quote(symbol, price, self.provider_name)
