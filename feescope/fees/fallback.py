"""
Documented fallback fees, used only when no live source produced data.

Every value here is a hand-picked heuristic, not protocol truth. They are
module-level so deployments can override them (or set the matching
``aux`` key per chain in config.yaml) and should be recalibrated
periodically. Candidates built from them are always flagged
``is_fallback`` and can therefore never yield an ``ok`` status.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from ..core.errors import UnsupportedChainType
from ..models import ChainType, FeeCandidate
from ..timeutils import now_utc
from . import units

if TYPE_CHECKING:
    from ..chains import ChainConfig

logger = logging.getLogger(__name__)

# utxo: typical recent-block average fee-rate
FALLBACK_SAT_PER_VBYTE = 50.0

# evm: fixed gas prices for chains whose fee market is stable enough
FIXED_GAS_GWEI: Dict[str, float] = {"bsc": 3.0, "polygon": 30.0, "avax": 35.0}
DEFAULT_EVM_GAS_GWEI = 20.0

# rollup: L2 execution price and L1 data-posting price per rollup
FALLBACK_L2_GWEI = 0.5
FALLBACK_L1_GWEI: Dict[str, float] = {"arb": 15.0, "op": 12.0, "base": 12.0}
DEFAULT_L1_GWEI = 12.0

# account (Solana): base signature fee
FALLBACK_LAMPORTS = 5000

# ledger (XRP): open-ledger cost under mild load
FALLBACK_DROPS = 900


def evm_fixed_gas_gwei(chain: "ChainConfig") -> Optional[float]:
    """Documented fixed gas price for chains that have one (bsc, polygon, avax)."""
    value = chain.aux.get("fixed_gas_gwei")
    if value is not None:
        return float(value)
    return FIXED_GAS_GWEI.get(chain.key)


def fallback_l1_gwei(chain: "ChainConfig") -> float:
    value = chain.aux.get("fallback_l1_gwei")
    if value is not None:
        return float(value)
    return FALLBACK_L1_GWEI.get(chain.key, DEFAULT_L1_GWEI)


def _candidate(chain: "ChainConfig", provider: str, fee_native: float, raw_units: Dict[str, Any]) -> FeeCandidate:
    return FeeCandidate(
        chain_key=chain.key,
        provider=provider,
        fee_native=fee_native,
        timestamp=now_utc(),
        raw_units=raw_units,
        is_fallback=True,
    )


def rollup_static_candidate(chain: "ChainConfig") -> FeeCandidate:
    """Static L2 price plus the chain's fallback L1 price."""
    l2 = FALLBACK_L2_GWEI
    l1 = fallback_l1_gwei(chain)
    l2_gas_limit = int(chain.aux.get("l2_gas_limit", units.L2_GAS_LIMIT))
    l1_data_gas = int(chain.aux.get("l1_data_gas", units.L1_DATA_GAS))
    return _candidate(
        chain,
        "static-fallback",
        units.rollup_fee_native(l2, l1, l2_gas_limit, l1_data_gas),
        {
            "gas_price_gwei": l2,
            "l1_gas_price_gwei": l1,
            "l2_gas_limit": l2_gas_limit,
            "l1_data_gas": l1_data_gas,
        },
    )


def fallback_candidate(chain: "ChainConfig") -> FeeCandidate:
    """
    One synthesized candidate for ``chain`` from the documented constants.

    Raises UnsupportedChainType for a chain type without a documented fallback.
    """
    if chain.type is ChainType.UTXO:
        sat = float(chain.aux.get("fallback_sat_per_vbyte", FALLBACK_SAT_PER_VBYTE))
        vbytes = int(chain.aux.get("tx_vbytes", units.TX_VBYTES))
        return _candidate(
            chain,
            "fallback-fee-rate",
            units.utxo_fee_native(sat, vbytes),
            {"sat_per_vbyte": sat, "tx_vbytes": vbytes},
        )
    if chain.type is ChainType.EVM:
        gwei = evm_fixed_gas_gwei(chain)
        if gwei is None:
            gwei = DEFAULT_EVM_GAS_GWEI
        gas_limit = int(chain.aux.get("gas_limit", units.EVM_GAS_LIMIT))
        return _candidate(
            chain,
            f"fixed-{gwei:g}-gwei",
            units.evm_fee_native(gwei, gas_limit),
            {"gas_price_gwei": gwei, "gas_limit": gas_limit},
        )
    if chain.type is ChainType.ROLLUP:
        return rollup_static_candidate(chain)
    if chain.type is ChainType.ACCOUNT:
        lamports = float(chain.aux.get("fallback_lamports", FALLBACK_LAMPORTS))
        return _candidate(chain, "static", units.lamports_to_sol(lamports), {"lamports": lamports})
    if chain.type is ChainType.LEDGER:
        drops = float(chain.aux.get("fallback_drops", FALLBACK_DROPS))
        return _candidate(chain, "heuristic", units.drops_to_xrp(drops), {"drops": drops})
    raise UnsupportedChainType(getattr(chain.type, "value", str(chain.type)))
