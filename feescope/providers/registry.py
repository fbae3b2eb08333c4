"""
Provider registry: central catalog of price sources and gas strategies.

Price sources are registered by name and ordered by a config-driven
priority list. Gas strategies are registered per ChainType; the chain
registry asks for one strategy per chain once, at build time.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, Union

from ..core.errors import UnsupportedChainType
from ..models import ChainType
from .base import GasCandidateProvider, SpotPriceProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry mapping provider names to classes/instances.

    Usage:
        registry = ProviderRegistry()
        registry.register_price("coinbase", CoinbaseSpotProvider)
        registry.register_gas(ChainType.EVM, EvmGasProvider)

        sources = registry.build_price_sources(["coinbase", "kraken"])
        strategy = registry.gas_provider_for(ChainType.EVM)
    """

    def __init__(self) -> None:
        self._price_factories: Dict[str, Any] = {}
        self._gas_factories: Dict[ChainType, Any] = {}
        self._price_instances: Dict[str, SpotPriceProvider] = {}
        self._gas_instances: Dict[ChainType, GasCandidateProvider] = {}

    def register_price(
        self,
        name: str,
        factory: Union[Type[SpotPriceProvider], SpotPriceProvider],
    ) -> None:
        """Register a USD price source by name."""
        self._price_factories[name] = factory
        self._price_instances.pop(name, None)
        logger.debug("Registered price source: %s", name)

    def register_gas(
        self,
        chain_type: ChainType,
        factory: Union[Type[GasCandidateProvider], GasCandidateProvider],
    ) -> None:
        """Register the gas candidate strategy for one chain type."""
        self._gas_factories[chain_type] = factory
        self._gas_instances.pop(chain_type, None)
        logger.debug("Registered gas strategy for %s", chain_type.value)

    def get_price(self, name: str) -> SpotPriceProvider:
        """Get or instantiate a price source by name."""
        if name not in self._price_instances:
            factory = self._price_factories.get(name)
            if factory is None:
                raise KeyError(
                    f"Unknown price source '{name}'. "
                    f"Available: {list(self._price_factories)}"
                )
            if isinstance(factory, type):
                self._price_instances[name] = factory()
            else:
                self._price_instances[name] = factory
        return self._price_instances[name]

    def gas_provider_for(self, chain_type: ChainType) -> GasCandidateProvider:
        """Get or instantiate the strategy for a chain type; UnsupportedChainType if none."""
        if chain_type not in self._gas_instances:
            factory = self._gas_factories.get(chain_type)
            if factory is None:
                raise UnsupportedChainType(chain_type.value)
            if isinstance(factory, type):
                self._gas_instances[chain_type] = factory()
            else:
                self._gas_instances[chain_type] = factory
        return self._gas_instances[chain_type]

    @property
    def price_names(self) -> List[str]:
        return list(self._price_factories)

    @property
    def gas_types(self) -> List[ChainType]:
        return list(self._gas_factories)

    def build_price_sources(
        self, priority: Optional[List[str]] = None
    ) -> List[SpotPriceProvider]:
        """Build an ordered list of price sources from a priority list; unknown names are skipped."""
        names = priority or list(self._price_factories)
        unknown = [n for n in names if n not in self._price_factories]
        if unknown:
            logger.warning("Ignoring unknown price sources in priority list: %s", unknown)
        return [self.get_price(n) for n in names if n in self._price_factories]
