"""Gas candidate strategies, one per chain type."""
from __future__ import annotations

from .account import AccountFeeProvider
from .common import GasStrategy
from .evm import EvmGasProvider
from .ledger import LedgerFeeProvider
from .rollup import RollupGasProvider
from .utxo import UtxoFeeProvider

__all__ = [
    "AccountFeeProvider",
    "EvmGasProvider",
    "GasStrategy",
    "LedgerFeeProvider",
    "RollupGasProvider",
    "UtxoFeeProvider",
]
