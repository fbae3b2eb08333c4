"""
Binance spot price source (USDT pairs treated as USD).

  GET https://api.binance.com/api/v3/ticker/price?symbol={SYM}USDT
"""
from __future__ import annotations

from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

BINANCE_BASE_URL = "https://api.binance.com"
HTTP_TIMEOUT_S = 8.0


class BinanceSpotProvider:
    """Fetch last traded price from the Binance public ticker."""

    @property
    def provider_name(self) -> str:
        return "binance"

    def get_spot(self, symbol: str) -> SpotQuote:
        url = f"{BINANCE_BASE_URL}/api/v3/ticker/price"
        data = get_json(url, params={"symbol": f"{symbol.upper()}USDT"}, timeout=HTTP_TIMEOUT_S)
        price = to_float(data.get("price")) if isinstance(data, dict) else None
        if price is None:
            raise ProviderUnavailable(url, "response missing price")
        return make_quote(symbol, price, self.provider_name)
