"""
UTXO fee-rate strategy (Bitcoin).

Four independent fee estimators are queried concurrently; each usable
fee-rate (sat/vB) becomes one candidate sized for a standard transaction.
When none of them answers, the median average fee-rate of the most recent
mined blocks stands in.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from ...fees import units
from ...fees.stats import median, median_low
from ...models import FeeCandidate
from ..http import fetch_json, provider_label
from ..resilience import gather_results
from .common import GasStrategy, build_candidate, first_valid, within

if TYPE_CHECKING:
    from ...chains import ChainConfig

logger = logging.getLogger(__name__)

MEMPOOL_URL = "https://mempool.space/api/v1/fees/recommended"
BLOCKSTREAM_URL = "https://blockstream.info/api/fee-estimates"
BLOCKCHAIN_INFO_URL = "https://api.blockchain.info/mempool/fees"
BITGO_URL = "https://www.bitgo.com/api/v2/btc/tx/fee"
RECENT_BLOCKS_URL = "https://mempool.space/api/v1/blocks"

SAT_PER_VBYTE_LIMITS = (1.0, 500.0)


def valid_sat(value) -> Optional[float]:
    return within(value, SAT_PER_VBYTE_LIMITS)


class UtxoFeeProvider(GasStrategy):
    """mempool.space, blockstream, blockchain.info and bitgo fee-rate estimates."""

    name = "utxo"

    def _candidate(self, chain: "ChainConfig", label: str, sat: Optional[float]) -> Optional[FeeCandidate]:
        if sat is None:
            return None
        vbytes = int(chain.aux.get("tx_vbytes", units.TX_VBYTES))
        return build_candidate(
            chain,
            label,
            units.utxo_fee_native(sat, vbytes),
            {"sat_per_vbyte": sat, "tx_vbytes": vbytes},
        )

    async def _mempool(self, chain: "ChainConfig") -> Optional[FeeCandidate]:
        data = await fetch_json(MEMPOOL_URL, timeout=self.per_timeout_s) or {}
        sat = first_valid(valid_sat(data.get(k)) for k in ("fastestFee", "halfHourFee", "hourFee"))
        return self._candidate(chain, provider_label("mempool", MEMPOOL_URL), sat)

    async def _blockstream(self, chain: "ChainConfig") -> Optional[FeeCandidate]:
        # {"1": 87.9, "2": 80.1, ...}: confirmation target -> sat/vB
        data = await fetch_json(BLOCKSTREAM_URL, timeout=self.per_timeout_s) or {}
        sat = median_low(valid_sat(v) for v in data.values())
        return self._candidate(chain, provider_label("blockstream", BLOCKSTREAM_URL), sat)

    async def _blockchain_info(self, chain: "ChainConfig") -> Optional[FeeCandidate]:
        data = await fetch_json(BLOCKCHAIN_INFO_URL, timeout=self.per_timeout_s) or {}
        sat = first_valid(valid_sat(data.get(k)) for k in ("priority", "regular"))
        return self._candidate(chain, provider_label("blockchain.info", BLOCKCHAIN_INFO_URL), sat)

    async def _bitgo(self, chain: "ChainConfig") -> Optional[FeeCandidate]:
        data = await fetch_json(BITGO_URL, timeout=self.per_timeout_s) or {}
        per_kb = data.get("feePerKb")
        sat = valid_sat(per_kb / 1000) if isinstance(per_kb, (int, float)) else None
        return self._candidate(chain, provider_label("bitgo", BITGO_URL), sat)

    async def _recent_blocks(self, chain: "ChainConfig") -> Optional[FeeCandidate]:
        # [{"height": ..., "extras": {"avgFeePerByte": 7, "feeRange": [1, 2, 4, ...]}}, ...]
        data = await fetch_json(RECENT_BLOCKS_URL, timeout=self.per_timeout_s) or []
        rates = []
        for block in data if isinstance(data, list) else []:
            extras = block.get("extras") if isinstance(block, dict) else None
            if not isinstance(extras, dict):
                continue
            fee_range = extras.get("feeRange")
            mid = fee_range[2] if isinstance(fee_range, list) and len(fee_range) > 2 else None
            rates.append(valid_sat(extras.get("avgFeePerByte") or mid))
        return self._candidate(chain, provider_label("recent-blocks", RECENT_BLOCKS_URL), median(rates))

    async def _collect(self, chain: "ChainConfig", l1_gas_price_gwei: Optional[float]) -> List[FeeCandidate]:
        candidates = await gather_results(
            [
                lambda: self._mempool(chain),
                lambda: self._blockstream(chain),
                lambda: self._blockchain_info(chain),
                lambda: self._bitgo(chain),
            ],
            per_timeout=self.total_timeout_s,
        )
        if candidates:
            return candidates

        recent = await gather_results([lambda: self._recent_blocks(chain)], per_timeout=self.total_timeout_s)
        if recent:
            logger.warning("%s: fee estimators failed, using recent block median", chain.key)
        return recent
