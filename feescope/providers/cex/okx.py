"""
OKX price source, read from the USD-margined perpetual ticker.

  GET https://www.okx.com/api/v5/market/ticker?instId={SYM}-USD-SWAP
"""
from __future__ import annotations

from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

OKX_BASE_URL = "https://www.okx.com"
HTTP_TIMEOUT_S = 8.0


class OkxSpotProvider:
    @property
    def provider_name(self) -> str:
        return "okx"

    def get_spot(self, symbol: str) -> SpotQuote:
        url = f"{OKX_BASE_URL}/api/v5/market/ticker"
        data = get_json(url, params={"instId": f"{symbol.upper()}-USD-SWAP"}, timeout=HTTP_TIMEOUT_S)
        rows = data.get("data") if isinstance(data, dict) else None
        price = to_float(rows[0].get("last")) if rows and isinstance(rows[0], dict) else None
        if price is None:
            raise ProviderUnavailable(url, "response missing data[0].last")
        return make_quote(symbol, price, self.provider_name)
