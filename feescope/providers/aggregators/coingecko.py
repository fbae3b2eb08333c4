"""
CoinGecko simple-price source.

  GET https://api.coingecko.com/api/v3/simple/price?ids={id}&vs_currencies=usd

COINGECKO_API_KEY (demo key) is sent as x-cg-demo-api-key when set.
"""
from __future__ import annotations

from ... import config
from ...core.errors import ProviderUnavailable
from ..base import SpotQuote, make_quote
from ..http import get_json, to_float

COINGECKO_BASE_URL = "https://api.coingecko.com"
HTTP_TIMEOUT_S = 8.0

COINGECKO_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binancecoin",
    "MATIC": "matic-network",
    "AVAX": "avalanche-2",
    "SOL": "solana",
    "XRP": "ripple",
    "ARB": "arbitrum",
    "OP": "optimism",
}


class CoinGeckoPriceProvider:
    """Aggregated USD price from CoinGecko; symbols need an explicit id mapping."""

    @property
    def provider_name(self) -> str:
        return "coingecko"

    def get_spot(self, symbol: str) -> SpotQuote:
        url = f"{COINGECKO_BASE_URL}/api/v3/simple/price"
        coin_id = COINGECKO_IDS.get(symbol.upper())
        if coin_id is None:
            raise ProviderUnavailable(url, f"no CoinGecko id for {symbol}")

        key = config.api_key("COINGECKO_API_KEY")
        headers = {"x-cg-demo-api-key": key} if key else None
        data = get_json(
            url,
            params={"ids": coin_id, "vs_currencies": "usd"},
            headers=headers,
            timeout=HTTP_TIMEOUT_S,
        )
        entry = data.get(coin_id) if isinstance(data, dict) else None
        price = to_float(entry.get("usd")) if isinstance(entry, dict) else None
        if price is None:
            raise ProviderUnavailable(url, f"response missing {coin_id}.usd")
        return make_quote(symbol, price, self.provider_name)
