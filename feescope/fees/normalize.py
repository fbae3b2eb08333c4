"""Attach a USD value to raw fee candidates."""
from __future__ import annotations

import math
from typing import Optional

from ..models import FeeCandidate, PricedCandidate


def usable_price(price_usd: Optional[float]) -> bool:
    return price_usd is not None and math.isfinite(price_usd) and price_usd > 0


def attach_usd(candidate: FeeCandidate, price_usd: Optional[float]) -> PricedCandidate:
    """
    ``fee_usd = fee_native * price_usd``.

    Never raises: a missing or unusable price (or a non-finite native fee)
    leaves ``fee_usd`` as None for the validator to deal with.
    """
    price = price_usd if usable_price(price_usd) else None
    fee_usd = None
    if price is not None and math.isfinite(candidate.fee_native):
        fee_usd = candidate.fee_native * price
    return PricedCandidate.from_candidate(candidate, price_usd=price, fee_usd=fee_usd)
