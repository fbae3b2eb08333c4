"""
EVM gas-price strategy (eth, bsc, polygon, avax).

Three independent sources run concurrently:
- ``eth_gasPrice`` over the chain's ordered RPC list
- latest ``baseFeePerGas`` plus ``eth_maxPriorityFeePerGas`` over the RPC list
- the chain's etherscan-style gas oracle, when configured

Gas prices outside the chain's plausible [min, max] gwei window are rejected
before conversion. When nothing usable comes back, the median base fee of
the last few blocks (plus a fixed tip markup) is tried over the RPC list;
failing that, chains with a documented fixed gas price emit one fallback
candidate.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from ... import config
from ...fees import units
from ...fees.fallback import evm_fixed_gas_gwei
from ...fees.stats import median
from ...models import FeeCandidate
from ..http import fetch_json, parse_hex_int, provider_label, rpc
from ..resilience import gather_results, race_or_fallback
from .common import GasStrategy, build_candidate, first_valid, within

if TYPE_CHECKING:
    from ...chains import ChainConfig

logger = logging.getLogger(__name__)

DEFAULT_GAS_PRICE_LIMITS = (0.1, 500.0)
BASE_FEE_BLOCKS = 5
BASE_FEE_MARKUP = 1.2


def gas_price_limits(chain: "ChainConfig") -> Tuple[float, float]:
    limits = chain.aux.get("gas_price_limits") or DEFAULT_GAS_PRICE_LIMITS
    return float(limits[0]), float(limits[1])


def valid_gas_price(chain: "ChainConfig", gwei) -> Optional[float]:
    """Reject non-positive or implausible gas prices for this chain."""
    n = within(gwei, gas_price_limits(chain))
    return n if n is not None and n > 0 else None


def gas_candidate(
    chain: "ChainConfig",
    label: str,
    gwei: Optional[float],
    *,
    is_fallback: bool = False,
) -> Optional[FeeCandidate]:
    gas_price = valid_gas_price(chain, gwei)
    if gas_price is None:
        return None
    gas_limit = int(chain.aux.get("gas_limit", units.EVM_GAS_LIMIT))
    return build_candidate(
        chain,
        label,
        units.evm_fee_native(gas_price, gas_limit),
        {"gas_price_gwei": gas_price, "gas_limit": gas_limit},
        is_fallback=is_fallback,
    )


class EvmGasProvider(GasStrategy):
    name = "evm"

    async def _rpc_gas_price(self, chain: "ChainConfig", url: str) -> Optional[FeeCandidate]:
        wei = parse_hex_int(await rpc(url, "eth_gasPrice", timeout=self.per_timeout_s))
        gwei = units.wei_to_gwei(wei) if wei else None
        return gas_candidate(chain, provider_label("rpc", url), gwei)

    async def _rpc_base_plus_tip(self, chain: "ChainConfig", url: str) -> Optional[FeeCandidate]:
        block, tip = await asyncio.gather(
            rpc(url, "eth_getBlockByNumber", ["latest", False], request_id=2, timeout=self.per_timeout_s),
            rpc(url, "eth_maxPriorityFeePerGas", request_id=3, timeout=self.per_timeout_s),
            return_exceptions=True,
        )
        base_wei = parse_hex_int(block.get("baseFeePerGas")) if isinstance(block, dict) else None
        tip_wei = parse_hex_int(tip) if not isinstance(tip, BaseException) else None
        total = (base_wei or 0) + (tip_wei or 0)
        if not total:
            return None
        return gas_candidate(chain, provider_label("rpc-priority", url), units.wei_to_gwei(total))

    async def _oracle(self, chain: "ChainConfig") -> Optional[FeeCandidate]:
        url = chain.aux.get("oracle_url")
        if not url:
            return None
        key = config.api_key("ETHERSCAN_KEY")
        data = await fetch_json(url, params={"apikey": key} if key else None, timeout=self.per_timeout_s)
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            return None
        gwei = first_valid(
            valid_gas_price(chain, result.get(k))
            for k in ("FastGasPrice", "ProposeGasPrice", "SafeGasPrice")
        )
        return gas_candidate(chain, provider_label("gasoracle", url), gwei)

    async def _median_base_fee(self, chain: "ChainConfig", url: str) -> Optional[FeeCandidate]:
        """Median ``baseFeePerGas`` of the last few blocks with a fixed markup for the tip."""
        latest = parse_hex_int(await rpc(url, "eth_blockNumber", request_id=5, timeout=self.per_timeout_s))
        if not latest:
            return None
        blocks = await asyncio.gather(
            *(
                rpc(url, "eth_getBlockByNumber", [hex(latest - i), False], request_id=6 + i,
                    timeout=self.per_timeout_s)
                for i in range(BASE_FEE_BLOCKS)
            ),
            return_exceptions=True,
        )
        base_gwei = median(
            units.wei_to_gwei(wei)
            for wei in (
                parse_hex_int(b.get("baseFeePerGas")) for b in blocks if isinstance(b, dict)
            )
            if wei
        )
        if base_gwei is None:
            return None
        return gas_candidate(chain, provider_label("basefee-median", url), base_gwei * BASE_FEE_MARKUP)

    def _over_endpoints(self, chain: "ChainConfig", fetch):
        providers = [lambda url=url: fetch(chain, url) for url in chain.endpoints]
        return lambda: race_or_fallback(providers, self.per_timeout_s, self.total_timeout_s)

    async def _collect(self, chain: "ChainConfig", l1_gas_price_gwei: Optional[float]) -> List[FeeCandidate]:
        candidates = await gather_results(
            [
                self._over_endpoints(chain, self._rpc_gas_price),
                self._over_endpoints(chain, self._rpc_base_plus_tip),
                lambda: self._oracle(chain),
            ],
            per_timeout=self.total_timeout_s,
        )
        if candidates:
            return candidates

        degraded = await self._over_endpoints(chain, self._median_base_fee)()
        if degraded is not None:
            logger.warning("%s: live gas sources failed, using recent median base fee", chain.key)
            return [degraded]

        fixed = evm_fixed_gas_gwei(chain)
        if fixed is None:
            logger.warning("%s: no gas price source answered", chain.key)
            return []
        logger.warning("%s: no gas price source answered, using fixed %.4g gwei", chain.key, fixed)
        fallback = gas_candidate(chain, f"fixed-{fixed:g}-gwei", fixed, is_fallback=True)
        return [fallback] if fallback is not None else []
