"""
Kraken price source, last trade of the USD pair.

  GET https://api.kraken.com/0/public/Ticker?pair={pair}

Kraken answers under its own pair key (XXBTZUSD for XBTUSD), so the first
entry of ``result`` is read rather than the requested name.
"""

from __future__ import annotations

from typing import Any, Optional

from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

KRAKEN_TICKER_URL = "https://api.kraken.com/0/public/Ticker"
HTTP_TIMEOUT_S = 8.0

# XBT is Kraken's code for BTC; MATIC trades as POL since the migration
KRAKEN_PAIRS = {
    "BTC": "XBTUSD",
    "MATIC": "POLUSD",
}


def _last_trade(result: Any) -> Optional[float]:
    if not isinstance(result, dict) or not result:
        return None
    ticker = next(iter(result.values()))
    last = ticker.get("c") if isinstance(ticker, dict) else None
    return to_float(last[0]) if last else None


class KrakenSpotProvider:
    @property
    def provider_name(self) -> str:
        return "kraken"

    def get_spot(self, symbol: str) -> SpotQuote:
        sym = symbol.upper()
        pair = KRAKEN_PAIRS.get(sym, f"{sym}USD")
        data = get_json(KRAKEN_TICKER_URL, params={"pair": pair}, timeout=HTTP_TIMEOUT_S)
        if not isinstance(data, dict):
            raise ProviderUnavailable(KRAKEN_TICKER_URL, "unexpected payload")
        if data.get("error"):
            raise ProviderUnavailable(KRAKEN_TICKER_URL, f"Kraken error: {data['error']}")

        price = _last_trade(data.get("result"))
        if price is None:
            raise ProviderUnavailable(KRAKEN_TICKER_URL, f"no last trade for {pair}")
        return make_quote(sym, price, self.provider_name)
