"""
Fee consensus: turn a chain's raw candidates into one trusted value.

Pipeline per chain:
1. attach USD to every candidate
2. drop non-positive native fees and anything older than the freshness
   window (absolute cutoff, not a weight)
3. drop non-finite USD values
4. split into in-range / out-of-range on the chain's USD range
5. measured (non-fallback) in-range candidates exist: their lower-middle
   median member is primary, status ``ok``
6. otherwise the lower-middle median of the best pool (in-range if any,
   else everything valid) is clamped into range and published as a
   synthesized primary, status ``estimated``
7. a primary still outside the range is clamped and forced to ``estimated``
8. nothing valid: ValidationFailed
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from ..core.errors import ValidationFailed
from ..models import FeeCandidate, FeeStatus, PricedCandidate
from ..timeutils import is_fresh, now_utc
from .normalize import attach_usd
from .stats import median_low_by

if TYPE_CHECKING:
    from ..chains import ChainConfig

logger = logging.getLogger(__name__)

FRESHNESS_WINDOW = timedelta(hours=3)
ESTIMATED_SUFFIX = "(estimated)"


@dataclass(frozen=True)
class ConsensusResult:
    """Valid candidates considered, the chosen primary and the resulting status."""

    candidates: Tuple[PricedCandidate, ...]
    primary: PricedCandidate
    status: FeeStatus


def enforce_range(chain: "ChainConfig", fee_usd: Optional[float]) -> Optional[float]:
    """Clamp into the chain's [min, max]; None for missing or non-finite input. Idempotent."""
    return chain.usd_range.clamp(fee_usd)


def _usd(c: PricedCandidate) -> float:
    return c.fee_usd  # type: ignore[return-value]


def _estimated(base: PricedCandidate, fee_usd: float) -> PricedCandidate:
    """Synthesized primary at ``fee_usd``, native fee rescaled at the same price."""
    fee_native = base.fee_native
    if base.price_usd and fee_usd != base.fee_usd:
        fee_native = fee_usd / base.price_usd
    provider = base.provider if base.provider.endswith(ESTIMATED_SUFFIX) else f"{base.provider}{ESTIMATED_SUFFIX}"
    return PricedCandidate.from_candidate(
        base,
        price_usd=base.price_usd,
        fee_usd=fee_usd,
        fee_native=fee_native,
        provider=provider,
        is_fallback=True,
    )


def normalize_candidates(
    chain: "ChainConfig",
    raw_candidates: Iterable[FeeCandidate],
    price_usd: Optional[float],
    *,
    now: Optional[datetime] = None,
    freshness: timedelta = FRESHNESS_WINDOW,
) -> ConsensusResult:
    """Run the consensus pipeline for one chain; raises ValidationFailed when nothing is usable."""
    ref = now or now_utc()
    priced = [attach_usd(c, price_usd) for c in raw_candidates]

    fresh = [
        c for c in priced
        if math.isfinite(c.fee_native) and c.fee_native > 0 and is_fresh(c.timestamp, freshness, ref)
    ]
    valid = [c for c in fresh if c.fee_usd is not None and math.isfinite(c.fee_usd)]
    if not valid:
        reason = "no fresh candidate" if not fresh else "no candidate with a USD value"
        raise ValidationFailed(chain.key, f"{reason} ({len(priced)} raw)")

    rng = chain.usd_range
    in_range = [c for c in valid if rng.contains(c.fee_usd)]
    measured = [c for c in in_range if not c.is_fallback]

    if measured:
        primary = median_low_by(measured, key=_usd)
        status = FeeStatus.OK
    else:
        pool = in_range or valid
        base = median_low_by(pool, key=_usd)
        primary = _estimated(base, enforce_range(chain, base.fee_usd))
        status = FeeStatus.ESTIMATED
        logger.info(
            "%s: no measured in-range candidate, estimated %.6g USD from %s",
            chain.key, primary.fee_usd, base.provider,
        )

    if not rng.contains(primary.fee_usd):
        primary = _estimated(primary, enforce_range(chain, primary.fee_usd))
        status = FeeStatus.ESTIMATED

    return ConsensusResult(candidates=tuple(valid), primary=primary, status=status)
