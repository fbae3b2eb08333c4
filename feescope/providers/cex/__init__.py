"""Exchange-backed USD price sources."""
from __future__ import annotations


from .binance import BinanceSpotProvider
from .coinbase import CoinbaseSpotProvider
from .kraken import KrakenSpotProvider
from .kucoin import KucoinSpotProvider
from .okx import OkxSpotProvider

__all__ = [
    "BinanceSpotProvider",
    "CoinbaseSpotProvider",
    "KrakenSpotProvider",
    "KucoinSpotProvider",
    "OkxSpotProvider",
]
