"""
Native-fee conversions per chain type and the assumed transaction shapes
they rely on.
"""
from __future__ import annotations

SATS_PER_BTC = 1e8
WEI_PER_GWEI = 1e9
GWEI_PER_NATIVE = 1e9
LAMPORTS_PER_SOL = 1e9
DROPS_PER_XRP = 1e6

TX_VBYTES = 140
EVM_GAS_LIMIT = 65_000
L2_GAS_LIMIT = 65_000
L1_DATA_GAS = 30_000
LAMPORTS_PER_SIGNATURE = 5_000
SOL_COMPUTE_UNITS = 200_000
MICRO_LAMPORTS_PER_LAMPORT = 1e6


def utxo_fee_native(sat_per_vbyte: float, vbytes: int = TX_VBYTES) -> float:
    return sat_per_vbyte * vbytes / SATS_PER_BTC


def evm_fee_native(gas_price_gwei: float, gas_limit: int = EVM_GAS_LIMIT) -> float:
    return gas_price_gwei / GWEI_PER_NATIVE * gas_limit


def rollup_fee_native(
    l2_gas_price_gwei: float,
    l1_gas_price_gwei: float,
    l2_gas_limit: int = L2_GAS_LIMIT,
    l1_data_gas: int = L1_DATA_GAS,
) -> float:
    """L2 execution cost plus the L1 data-posting share."""
    return evm_fee_native(l2_gas_price_gwei, l2_gas_limit) + evm_fee_native(l1_gas_price_gwei, l1_data_gas)


def lamports_to_sol(lamports: float) -> float:
    return lamports / LAMPORTS_PER_SOL


def solana_fee_lamports(
    priority_micro_lamports: float,
    compute_units: int = SOL_COMPUTE_UNITS,
    lamports_per_signature: float = LAMPORTS_PER_SIGNATURE,
) -> float:
    """Base signature fee plus the compute-unit priority fee, one signature."""
    return lamports_per_signature + priority_micro_lamports * compute_units / MICRO_LAMPORTS_PER_LAMPORT


def drops_to_xrp(drops: float) -> float:
    return drops / DROPS_PER_XRP


def wei_to_gwei(wei: int) -> float:
    return wei / WEI_PER_GWEI
