"""Aggregator-backed USD price sources."""
from __future__ import annotations

from .coingecko import CoinGeckoPriceProvider
from .cryptocompare import CryptoComparePriceProvider

__all__ = ["CoinGeckoPriceProvider", "CryptoComparePriceProvider"]
