"""
Rollup (L2) strategy: fee = L2 execution + L1 data posting.

The L2 gas price comes from ``eth_gasPrice`` over the rollup's RPC list and,
independently, from the rollup gas-price oracle (``rollup_gasPrices``). The
L1 gas price is taken, in order, from the orchestrator, from the oracle, or
from the documented per-rollup constant; a candidate priced with the
constant is flagged ``is_fallback``.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from ...fees import units
from ...fees.fallback import fallback_l1_gwei, rollup_static_candidate
from ...models import FeeCandidate
from ..http import parse_hex_int, provider_label, rpc
from ..resilience import race_or_fallback
from .common import GasStrategy, build_candidate, within
from .evm import DEFAULT_GAS_PRICE_LIMITS

if TYPE_CHECKING:
    from ...chains import ChainConfig

logger = logging.getLogger(__name__)

L2_GWEI_LIMITS = (0.01, 5.0)
# same window the L1 chain applies to its own gas price
L1_GWEI_LIMITS = DEFAULT_GAS_PRICE_LIMITS


def valid_l2_gwei(value) -> Optional[float]:
    return within(value, L2_GWEI_LIMITS)


def l1_gwei_limits(chain: "ChainConfig") -> Tuple[float, float]:
    limits = chain.aux.get("l1_gas_price_limits") or L1_GWEI_LIMITS
    return float(limits[0]), float(limits[1])


def valid_l1_gwei(chain: "ChainConfig", value) -> Optional[float]:
    return within(value, l1_gwei_limits(chain))


@dataclass(frozen=True)
class OracleReading:
    """One ``rollup_gasPrices`` answer, already validated."""

    label: str
    l2_gwei: Optional[float]
    l1_gwei: Optional[float]
    l1_data_gas: Optional[int]


@dataclass(frozen=True)
class L2Price:
    label: str
    gwei: float


class RollupGasProvider(GasStrategy):
    name = "rollup"

    async def _rpc_gas_price(self, url: str) -> Optional[L2Price]:
        wei = parse_hex_int(await rpc(url, "eth_gasPrice", timeout=self.per_timeout_s))
        gwei = valid_l2_gwei(units.wei_to_gwei(wei)) if wei else None
        return L2Price(provider_label("rpc", url), gwei) if gwei is not None else None

    async def _oracle(self, chain: "ChainConfig", url: str) -> Optional[OracleReading]:
        result = await rpc(url, "rollup_gasPrices", timeout=self.per_timeout_s)
        if not isinstance(result, dict):
            return None
        l2_wei = parse_hex_int(result.get("l2GasPrice"))
        l1_wei = parse_hex_int(result.get("l1GasPrice"))
        l1_data_wei = parse_hex_int(result.get("l1DataFee") or result.get("l1Fee"))
        l1_data_gas = None
        if l1_data_wei and l1_wei:
            # data fee in wei / L1 price = data gas, never below the configured floor
            floor = int(chain.aux.get("l1_data_gas", units.L1_DATA_GAS))
            l1_data_gas = max(round(l1_data_wei / l1_wei), floor)
        reading = OracleReading(
            label=provider_label("rollup", url),
            l2_gwei=valid_l2_gwei(units.wei_to_gwei(l2_wei)) if l2_wei else None,
            l1_gwei=valid_l1_gwei(chain, units.wei_to_gwei(l1_wei)) if l1_wei else None,
            l1_data_gas=l1_data_gas,
        )
        if reading.l2_gwei is None and reading.l1_gwei is None:
            return None
        return reading

    def _candidate(
        self,
        chain: "ChainConfig",
        label: str,
        l2_gwei: float,
        l1_gwei: float,
        l1_data_gas: int,
        *,
        is_fallback: bool,
    ) -> Optional[FeeCandidate]:
        l2_gas_limit = int(chain.aux.get("l2_gas_limit", units.L2_GAS_LIMIT))
        return build_candidate(
            chain,
            label,
            units.rollup_fee_native(l2_gwei, l1_gwei, l2_gas_limit, l1_data_gas),
            {
                "gas_price_gwei": l2_gwei,
                "l1_gas_price_gwei": l1_gwei,
                "l2_gas_limit": l2_gas_limit,
                "l1_data_gas": l1_data_gas,
            },
            is_fallback=is_fallback,
        )

    async def _collect(self, chain: "ChainConfig", l1_gas_price_gwei: Optional[float]) -> List[FeeCandidate]:
        l2_price, oracle = await asyncio.gather(
            race_or_fallback(
                [lambda url=url: self._rpc_gas_price(url) for url in chain.endpoints],
                self.per_timeout_s,
                self.total_timeout_s,
            ),
            race_or_fallback(
                [lambda url=url: self._oracle(chain, url) for url in chain.endpoints],
                self.per_timeout_s,
                self.total_timeout_s,
            ),
        )

        l2_sources: List[L2Price] = []
        if l2_price is not None:
            l2_sources.append(l2_price)
        if oracle is not None and oracle.l2_gwei is not None:
            l2_sources.append(L2Price(oracle.label, oracle.l2_gwei))
        if not l2_sources:
            logger.warning("%s: no L2 gas price available, using static fallback", chain.key)
            return [rollup_static_candidate(chain)]

        l1_data_gas = int(chain.aux.get("l1_data_gas", units.L1_DATA_GAS))
        l1 = valid_l1_gwei(chain, l1_gas_price_gwei)
        l1_is_fallback = False
        if l1 is None and oracle is not None and oracle.l1_gwei is not None:
            l1 = oracle.l1_gwei
            l1_data_gas = oracle.l1_data_gas or l1_data_gas
        if l1 is None:
            l1 = fallback_l1_gwei(chain)
            l1_is_fallback = True
            logger.info("%s: no L1 gas price, using fallback %.4g gwei", chain.key, l1)

        candidates = [
            self._candidate(chain, src.label, src.gwei, l1, l1_data_gas, is_fallback=l1_is_fallback)
            for src in l2_sources
        ]
        return [c for c in candidates if c is not None]
