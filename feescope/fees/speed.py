"""Confirmation-time heuristics per chain type (seconds)."""
from __future__ import annotations

from typing import Optional

from ..models import ChainType, FeeCandidate

UTXO_FAST_SAT = 60.0
UTXO_MEDIUM_SAT = 30.0
UTXO_FAST_S = 30
UTXO_MEDIUM_S = 120
UTXO_SLOW_S = 300

EVM_S = 120

ROLLUP_FAST_GWEI = 1.0
ROLLUP_FAST_S = 15
ROLLUP_SLOW_S = 45

ACCOUNT_S = 4
LEDGER_S = 4


def _raw(candidate: Optional[FeeCandidate], name: str) -> Optional[float]:
    if candidate is None:
        return None
    value = candidate.raw_units.get(name)
    return float(value) if isinstance(value, (int, float)) and value > 0 else None


def calc_speed(
    chain_type: ChainType,
    candidate: Optional[FeeCandidate],
    fixed_s: Optional[int] = None,
) -> int:
    """Expected confirmation latency for the chosen candidate. Pure, no I/O.

    ``fixed_s`` (a chain's configured ``speed_s``) wins over the heuristics.
    """
    if fixed_s is not None:
        return int(fixed_s)
    if chain_type is ChainType.UTXO:
        sat = _raw(candidate, "sat_per_vbyte")
        if sat is None:
            return UTXO_SLOW_S
        if sat >= UTXO_FAST_SAT:
            return UTXO_FAST_S
        if sat >= UTXO_MEDIUM_SAT:
            return UTXO_MEDIUM_S
        return UTXO_SLOW_S
    if chain_type is ChainType.ROLLUP:
        gwei = _raw(candidate, "gas_price_gwei")
        if gwei is not None and gwei > ROLLUP_FAST_GWEI:
            return ROLLUP_FAST_S
        return ROLLUP_SLOW_S
    if chain_type is ChainType.ACCOUNT:
        return ACCOUNT_S
    if chain_type is ChainType.LEDGER:
        return LEDGER_S
    return EVM_S
