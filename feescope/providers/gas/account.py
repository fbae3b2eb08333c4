"""
Account-model (Solana) fee strategy.

Per RPC endpoint, in order: the median of ``getRecentPrioritizationFees``
over the recent slots, priced for one signature and a standard compute
budget on top of the base signature fee.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from ...fees import units
from ...fees.fallback import fallback_candidate
from ...fees.stats import median
from ...models import FeeCandidate
from ..http import provider_label, rpc, to_float
from ..resilience import race_or_fallback
from .common import GasStrategy, build_candidate

if TYPE_CHECKING:
    from ...chains import ChainConfig

logger = logging.getLogger(__name__)


class AccountFeeProvider(GasStrategy):
    name = "account"

    async def _prioritization_fees(self, chain: "ChainConfig", url: str) -> Optional[FeeCandidate]:
        # [{"slot": 348125, "prioritizationFee": 1500}, ...] in micro-lamports per compute unit
        result = await rpc(url, "getRecentPrioritizationFees", timeout=self.per_timeout_s)
        if not isinstance(result, list) or not result:
            return None
        priority = median(
            to_float(item.get("prioritizationFee")) for item in result if isinstance(item, dict)
        )
        if priority is None or priority < 0:
            return None
        compute_units = int(chain.aux.get("compute_units", units.SOL_COMPUTE_UNITS))
        base = float(chain.aux.get("lamports_per_signature", units.LAMPORTS_PER_SIGNATURE))
        lamports = units.solana_fee_lamports(priority, compute_units, base)
        return build_candidate(
            chain,
            provider_label("rpc", url),
            units.lamports_to_sol(lamports),
            {
                "lamports": lamports,
                "priority_micro_lamports": priority,
                "compute_units": compute_units,
            },
        )

    async def _collect(self, chain: "ChainConfig", l1_gas_price_gwei: Optional[float]) -> List[FeeCandidate]:
        candidate = await race_or_fallback(
            [lambda url=url: self._prioritization_fees(chain, url) for url in chain.endpoints],
            self.per_timeout_s,
            self.total_timeout_s,
        )
        if candidate is None:
            logger.warning("%s: no RPC answered with prioritization fees, using heuristic fee", chain.key)
            candidate = fallback_candidate(chain)
        return [candidate]
