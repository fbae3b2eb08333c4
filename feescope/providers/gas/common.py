"""
Shared plumbing for the per-chain-type gas strategies.

A strategy implements ``_collect``; the public ``fetch_candidates`` wrapper
guarantees the GasCandidateProvider contract: it never raises, an internal
error simply yields no candidates.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple

from ... import config
from ...models import FeeCandidate
from ...timeutils import now_utc
from ..http import to_float

if TYPE_CHECKING:
    from ...chains import ChainConfig

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_TIMEOUT_S = 12.0


def within(value: Any, limits: Tuple[float, float]) -> Optional[float]:
    """``value`` as float when finite and inside [lo, hi]; otherwise None."""
    n = to_float(value)
    if n is None or not math.isfinite(n):
        return None
    lo, hi = limits
    if n < lo or n > hi:
        return None
    return n


def first_valid(values: Iterable[Optional[float]]) -> Optional[float]:
    for v in values:
        if v is not None:
            return v
    return None


def build_candidate(
    chain: "ChainConfig",
    provider: str,
    fee_native: Optional[float],
    raw_units: Dict[str, Any],
    *,
    is_fallback: bool = False,
) -> Optional[FeeCandidate]:
    """FeeCandidate stamped now, or None for a missing/non-positive native fee."""
    if fee_native is None or not math.isfinite(fee_native) or fee_native <= 0:
        return None
    return FeeCandidate(
        chain_key=chain.key,
        provider=provider,
        fee_native=fee_native,
        timestamp=now_utc(),
        raw_units=raw_units,
        is_fallback=is_fallback,
    )


class GasStrategy:
    """Base for gas candidate strategies; subclasses implement ``_collect``."""

    name = "gas"

    def __init__(
        self,
        *,
        per_timeout_s: Optional[float] = None,
        total_timeout_s: Optional[float] = None,
    ) -> None:
        self._per_timeout_s = per_timeout_s
        self._total_timeout_s = total_timeout_s

    @property
    def provider_name(self) -> str:
        return self.name

    @property
    def per_timeout_s(self) -> float:
        return self._per_timeout_s or config.http_timeout_s()

    @property
    def total_timeout_s(self) -> float:
        return self._total_timeout_s or DEFAULT_TOTAL_TIMEOUT_S

    async def fetch_candidates(
        self,
        chain: "ChainConfig",
        l1_gas_price_gwei: Optional[float] = None,
    ) -> List[FeeCandidate]:
        try:
            candidates = await self._collect(chain, l1_gas_price_gwei)
        except Exception as exc:
            logger.warning(
                "%s: %s strategy failed: %s: %s", chain.key, self.name, type(exc).__name__, exc
            )
            return []
        logger.debug(
            "%s: %d candidate(s) from %s", chain.key, len(candidates),
            ",".join(c.provider for c in candidates) or "-",
        )
        return candidates

    async def _collect(
        self,
        chain: "ChainConfig",
        l1_gas_price_gwei: Optional[float],
    ) -> List[FeeCandidate]:
        raise NotImplementedError
