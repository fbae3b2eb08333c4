"""
Ledger-fee (XRP) strategy.

rippled speaks its own JSON dialect (``{"method": ..., "params": [{}]}``),
so requests go through the plain JSON POST helper rather than JSON-RPC 2.0.
``fee`` and ``server_info`` are independent readings and run concurrently.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional

from ...core.errors import ProviderUnavailable
from ...fees import units
from ...fees.fallback import fallback_candidate
from ...models import FeeCandidate
from ..http import post, provider_label, to_float
from ..resilience import gather_results, race_or_fallback
from .common import GasStrategy, build_candidate, first_valid

if TYPE_CHECKING:
    from ...chains import ChainConfig

logger = logging.getLogger(__name__)


def _positive(value: Any) -> Optional[float]:
    n = to_float(value)
    return n if n is not None and n > 0 else None


class LedgerFeeProvider(GasStrategy):
    name = "ledger"

    async def _command(self, url: str, method: str) -> dict:
        payload = await post(url, {"method": method, "params": [{}]}, timeout=self.per_timeout_s)
        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, dict) or result.get("status") == "error":
            raise ProviderUnavailable(url, f"{method}: unusable result")
        return result

    def _candidate(self, chain: "ChainConfig", label: str, drops: Optional[float]) -> Optional[FeeCandidate]:
        if drops is None:
            return None
        return build_candidate(chain, label, units.drops_to_xrp(drops), {"drops": drops})

    async def _fee(self, chain: "ChainConfig", url: str) -> Optional[FeeCandidate]:
        result = await self._command(url, "fee")
        drops = result.get("drops") or {}
        value = first_valid(_positive(drops.get(k)) for k in ("open_ledger", "median_fee"))
        return self._candidate(chain, provider_label("fee", url), value)

    async def _server_info(self, chain: "ChainConfig", url: str) -> Optional[FeeCandidate]:
        result = await self._command(url, "server_info")
        ledger = (result.get("info") or {}).get("validated_ledger") or {}
        base_fee_xrp = _positive(ledger.get("base_fee_xrp"))
        drops = base_fee_xrp * units.DROPS_PER_XRP if base_fee_xrp is not None else None
        return self._candidate(chain, provider_label("server_info", url), drops)

    def _over_endpoints(self, chain: "ChainConfig", fetch):
        providers = [lambda url=url: fetch(chain, url) for url in chain.endpoints]
        return lambda: race_or_fallback(providers, self.per_timeout_s, self.total_timeout_s)

    async def _collect(self, chain: "ChainConfig", l1_gas_price_gwei: Optional[float]) -> List[FeeCandidate]:
        candidates = await gather_results(
            [
                self._over_endpoints(chain, self._fee),
                self._over_endpoints(chain, self._server_info),
            ],
            per_timeout=self.total_timeout_s,
        )
        if not candidates:
            logger.warning("%s: ledger RPC unavailable, using heuristic fee", chain.key)
            candidates = [fallback_candidate(chain)]
        return candidates
