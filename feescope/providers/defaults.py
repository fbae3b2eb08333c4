"""
Default provider registry configuration.

Registers built-in price sources and gas strategies and builds the
PriceGatherer from config.yaml settings. To add a new price source,
register it here and add it to the priority list.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .. import config
from ..models import ChainType
from ..state import FetchMeta, PriceCache
from .aggregators.coingecko import CoinGeckoPriceProvider
from .aggregators.cryptocompare import CryptoComparePriceProvider
from .cex.binance import BinanceSpotProvider
from .cex.coinbase import CoinbaseSpotProvider
from .cex.kraken import KrakenSpotProvider
from .cex.kucoin import KucoinSpotProvider
from .cex.okx import OkxSpotProvider
from .gas.account import AccountFeeProvider
from .gas.evm import EvmGasProvider
from .gas.ledger import LedgerFeeProvider
from .gas.rollup import RollupGasProvider
from .gas.utxo import UtxoFeeProvider
from .gatherer import DEFAULT_SOURCE_TIMEOUT_S, PriceGatherer
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

# Default source priority (config.yaml can override these)
DEFAULT_PRICE_PRIORITY = [
    "coingecko",
    "cryptocompare",
    "binance",
    "kucoin",
    "kraken",
    "coinbase",
    "okx",
]


def create_default_registry() -> ProviderRegistry:
    """Create a registry with all built-in providers."""
    registry = ProviderRegistry()
    registry.register_price("coingecko", CoinGeckoPriceProvider)
    registry.register_price("cryptocompare", CryptoComparePriceProvider)
    registry.register_price("binance", BinanceSpotProvider)
    registry.register_price("kucoin", KucoinSpotProvider)
    registry.register_price("kraken", KrakenSpotProvider)
    registry.register_price("coinbase", CoinbaseSpotProvider)
    registry.register_price("okx", OkxSpotProvider)

    registry.register_gas(ChainType.UTXO, UtxoFeeProvider)
    registry.register_gas(ChainType.EVM, EvmGasProvider)
    registry.register_gas(ChainType.ROLLUP, RollupGasProvider)
    registry.register_gas(ChainType.ACCOUNT, AccountFeeProvider)
    registry.register_gas(ChainType.LEDGER, LedgerFeeProvider)
    return registry


def load_price_priority() -> List[str]:
    """
    Price source priority from config.yaml.

    Expected YAML structure:
        providers:
          price_priority: ["coingecko", "binance", ...]
    """
    return config.price_priority() or list(DEFAULT_PRICE_PRIORITY)


def create_price_gatherer(
    registry: Optional[ProviderRegistry] = None,
    priority: Optional[List[str]] = None,
    *,
    fetch_meta: Optional[FetchMeta] = None,
    cache: Optional[PriceCache] = None,
) -> PriceGatherer:
    """Build a PriceGatherer over the configured sources."""
    reg = registry or create_default_registry()
    order = priority or load_price_priority()
    sources = reg.build_price_sources(order)
    if not sources:
        logger.warning("No price sources configured (priority=%s)", order)
    return PriceGatherer(
        sources,
        per_timeout_s=DEFAULT_SOURCE_TIMEOUT_S,
        fetch_meta=fetch_meta,
        cache=cache,
    )
