"""
Chain registry: static per-chain configuration.

Each ChainConfig carries the chain's fee model (ChainType), native symbol,
plausible USD fee range, RPC endpoints and the auxiliary constants its gas
strategy needs. The strategy itself is chosen once, when the registry is
built, and stored alongside the config.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from . import config
from .core.errors import UnknownChain, UnsupportedChainType
from .models import ChainType, UsdRange
from .providers.base import GasCandidateProvider
from .providers.defaults import create_default_registry
from .providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainConfig:
    """Immutable configuration of one supported chain."""

    key: str
    symbol: str
    type: ChainType
    usd_range: UsdRange
    endpoints: Tuple[str, ...] = ()
    native_decimals: int = 18
    aux: Mapping[str, Any] = field(default_factory=dict)
    label: str = ""
    provider: Optional[GasCandidateProvider] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.endpoints, str):
            object.__setattr__(self, "endpoints", (self.endpoints,))
        else:
            object.__setattr__(self, "endpoints", tuple(e for e in self.endpoints if e))
        object.__setattr__(self, "aux", MappingProxyType(dict(self.aux)))

    def with_provider(self, provider: GasCandidateProvider) -> ChainConfig:
        return replace(self, provider=provider)


def _gasoracle(host: str) -> str:
    return f"https://{host}/api?module=gastracker&action=gasoracle"


DEFAULT_CHAINS: Tuple[ChainConfig, ...] = (
    ChainConfig(
        key="btc",
        symbol="BTC",
        type=ChainType.UTXO,
        usd_range=UsdRange(0.01, 20.0),
        native_decimals=8,
        aux={"tx_vbytes": 140},
        label="Bitcoin",
    ),
    ChainConfig(
        key="eth",
        symbol="ETH",
        type=ChainType.EVM,
        usd_range=UsdRange(0.01, 50.0),
        endpoints=("https://rpc.ankr.com/eth", "https://ethereum-rpc.publicnode.com"),
        aux={
            "gas_limit": 65000,
            "gas_price_limits": (0.1, 500.0),
            "oracle_url": _gasoracle("api.etherscan.io"),
        },
        label="Ethereum",
    ),
    ChainConfig(
        key="bsc",
        symbol="BNB",
        type=ChainType.EVM,
        usd_range=UsdRange(0.005, 1.0),
        endpoints=("https://bsc-dataseed.binance.org", "https://bsc-rpc.publicnode.com"),
        aux={
            "gas_limit": 65000,
            "gas_price_limits": (1.0, 50.0),
            "oracle_url": _gasoracle("api.bscscan.com"),
            "fixed_gas_gwei": 3.0,
        },
        label="BNB Smart Chain",
    ),
    ChainConfig(
        key="polygon",
        symbol="MATIC",
        type=ChainType.EVM,
        usd_range=UsdRange(0.0005, 0.2),
        endpoints=("https://polygon-rpc.com", "https://polygon-bor.publicnode.com"),
        aux={
            "gas_limit": 65000,
            "gas_price_limits": (1.0, 500.0),
            "oracle_url": _gasoracle("api.polygonscan.com"),
            "fixed_gas_gwei": 30.0,
        },
        label="Polygon PoS",
    ),
    ChainConfig(
        key="avax",
        symbol="AVAX",
        type=ChainType.EVM,
        usd_range=UsdRange(0.001, 2.0),
        endpoints=(
            "https://api.avax.network/ext/bc/C/rpc",
            "https://avalanche-c-chain.publicnode.com",
        ),
        aux={
            "gas_limit": 65000,
            "gas_price_limits": (1.0, 500.0),
            "oracle_url": _gasoracle("api.snowtrace.io"),
            "fixed_gas_gwei": 35.0,
        },
        label="Avalanche C-Chain",
    ),
    ChainConfig(
        key="sol",
        symbol="SOL",
        type=ChainType.ACCOUNT,
        usd_range=UsdRange(0.0001, 0.02),
        endpoints=("https://api.mainnet-beta.solana.com", "https://rpc.ankr.com/solana"),
        native_decimals=9,
        aux={"fallback_lamports": 5000},
        label="Solana",
    ),
    ChainConfig(
        key="xrp",
        symbol="XRP",
        type=ChainType.LEDGER,
        usd_range=UsdRange(0.0005, 0.05),
        endpoints=("https://s1.ripple.com:51234",),
        native_decimals=6,
        aux={"fallback_drops": 900},
        label="XRP Ledger",
    ),
    ChainConfig(
        key="arb",
        symbol="ETH",
        type=ChainType.ROLLUP,
        usd_range=UsdRange(0.005, 3.0),
        endpoints=("https://arb1.arbitrum.io/rpc", "https://arbitrum-one.publicnode.com"),
        aux={
            "l2_gas_limit": 65000,
            "l1_data_gas": 30000,
            "fallback_l1_gwei": 15.0,
            "speed_s": 45,
        },
        label="Arbitrum One",
    ),
    ChainConfig(
        key="op",
        symbol="ETH",
        type=ChainType.ROLLUP,
        usd_range=UsdRange(0.005, 3.0),
        endpoints=("https://mainnet.optimism.io", "https://optimism-rpc.publicnode.com"),
        aux={"l2_gas_limit": 65000, "l1_data_gas": 30000, "fallback_l1_gwei": 12.0},
        label="OP Mainnet",
    ),
    ChainConfig(
        key="base",
        symbol="ETH",
        type=ChainType.ROLLUP,
        usd_range=UsdRange(0.005, 3.0),
        endpoints=("https://mainnet.base.org", "https://base-rpc.publicnode.com"),
        aux={"l2_gas_limit": 65000, "l1_data_gas": 30000, "fallback_l1_gwei": 12.0},
        label="Base",
    ),
)

# override keys that map onto ChainConfig fields; anything else lands in aux
_FIELD_KEYS = {"symbol", "type", "min_usd", "max_usd", "rpc", "native_decimals", "label"}


class ChainRegistry:
    """Read-only lookup of ChainConfig by key, in registration order."""

    def __init__(self, chains: Iterable[ChainConfig]) -> None:
        self._chains: Dict[str, ChainConfig] = {}
        for chain in chains:
            if chain.key in self._chains:
                raise ValueError(f"Duplicate chain key '{chain.key}'")
            self._chains[chain.key] = chain

    def get(self, chain_key: str) -> ChainConfig:
        try:
            return self._chains[chain_key]
        except KeyError:
            raise UnknownChain(chain_key, available=list(self._chains)) from None

    def keys(self) -> List[str]:
        return list(self._chains)

    def values(self) -> List[ChainConfig]:
        return list(self._chains.values())

    def subset(self, chain_keys: Iterable[str]) -> ChainRegistry:
        """Registry restricted to ``chain_keys``; UnknownChain for any missing key."""
        return ChainRegistry(self.get(k) for k in chain_keys)

    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)

    def __contains__(self, chain_key: object) -> bool:
        return chain_key in self._chains

    def __repr__(self) -> str:
        return f"ChainRegistry({self.keys()})"


def _parse_chain_type(value: Any) -> ChainType:
    if isinstance(value, ChainType):
        return value
    try:
        return ChainType(str(value).lower())
    except ValueError:
        raise UnsupportedChainType(value) from None


def apply_override(chain: Optional[ChainConfig], key: str, override: Mapping[str, Any]) -> ChainConfig:
    """
    Apply one ``chains.overrides.<key>`` block from config.yaml.

    With ``chain`` None the override must fully describe a new chain
    (symbol, type, min_usd, max_usd).
    """
    if chain is None:
        missing = [k for k in ("symbol", "type", "min_usd", "max_usd") if k not in override]
        if missing:
            raise ValueError(f"chain '{key}' is not built in and its override lacks {missing}")
        chain = ChainConfig(
            key=key,
            symbol=str(override["symbol"]).upper(),
            type=_parse_chain_type(override["type"]),
            usd_range=UsdRange(float(override["min_usd"]), float(override["max_usd"])),
        )

    changes: Dict[str, Any] = {}
    if "symbol" in override:
        changes["symbol"] = str(override["symbol"]).upper()
    if "type" in override:
        changes["type"] = _parse_chain_type(override["type"])
    if "min_usd" in override or "max_usd" in override:
        changes["usd_range"] = UsdRange(
            float(override.get("min_usd", chain.usd_range.min_usd)),
            float(override.get("max_usd", chain.usd_range.max_usd)),
        )
    if "rpc" in override:
        rpc = override["rpc"]
        changes["endpoints"] = (rpc,) if isinstance(rpc, str) else tuple(rpc or ())
    if "native_decimals" in override:
        changes["native_decimals"] = int(override["native_decimals"])
    if "label" in override:
        changes["label"] = str(override["label"])

    extra = {k: v for k, v in override.items() if k not in _FIELD_KEYS}
    if extra:
        changes["aux"] = {**chain.aux, **extra}
    return replace(chain, **changes) if changes else chain


def build_default_chain_registry(
    cfg: Optional[Mapping[str, Any]] = None,
    providers: Optional[ProviderRegistry] = None,
) -> ChainRegistry:
    """
    Build the registry of enabled chains with their gas strategies attached.

    ``cfg`` defaults to the merged feescope config; its ``chains.enabled``
    list restricts and orders the chain set and ``chains.overrides`` patches
    individual chains. Raises UnsupportedChainType when a chain's type has
    no registered strategy.
    """
    settings = cfg if cfg is not None else config.get_config()
    chain_cfg = settings.get("chains") or {}
    overrides: Mapping[str, Any] = chain_cfg.get("overrides") or {}
    enabled: List[str] = list(chain_cfg.get("enabled") or [])

    builtin = {c.key: c for c in DEFAULT_CHAINS}
    keys = enabled or list(builtin)
    reg = providers or create_default_registry()

    chains: List[ChainConfig] = []
    for key in keys:
        base = builtin.get(key)
        override = overrides.get(key)
        if base is None and not override:
            logger.warning("Skipping unknown chain '%s' in chains.enabled", key)
            continue
        chain = apply_override(base, key, override) if override else base
        chains.append(chain.with_provider(reg.gas_provider_for(chain.type)))

    logger.debug("Chain registry: %s", [c.key for c in chains])
    return ChainRegistry(chains)
