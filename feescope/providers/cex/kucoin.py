"""
KuCoin spot price source (USDT pairs treated as USD).

  GET https://api.kucoin.com/api/v1/market/orderbook/level1?symbol={SYM}-USDT
"""
from __future__ import annotations

from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

KUCOIN_BASE_URL = "https://api.kucoin.com"
HTTP_TIMEOUT_S = 8.0


class KucoinSpotProvider:
    @property
    def provider_name(self) -> str:
        return "kucoin"

    def get_spot(self, symbol: str) -> SpotQuote:
        url = f"{KUCOIN_BASE_URL}/api/v1/market/orderbook/level1"
        data = get_json(url, params={"symbol": f"{symbol.upper()}-USDT"}, timeout=HTTP_TIMEOUT_S)
        level1 = data.get("data") if isinstance(data, dict) else None
        price = to_float(level1.get("price")) if isinstance(level1, dict) else None
        if price is None:
            raise ProviderUnavailable(url, "response missing data.price")
        return make_quote(symbol, price, self.provider_name)
