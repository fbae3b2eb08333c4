"""
Robust central estimates used by price gathering and fee consensus.
"""
from __future__ import annotations

import math
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def finite_values(values: Iterable[Optional[float]]) -> List[float]:
    return [float(v) for v in values if v is not None and math.isfinite(v)]


def median(values: Iterable[Optional[float]]) -> Optional[float]:
    """Classic median (mean of the two middle values for even counts); None when empty."""
    arr = np.asarray(finite_values(values), dtype=float)
    if arr.size == 0:
        return None
    return float(np.median(arr))


def median_low(values: Iterable[Optional[float]]) -> Optional[float]:
    """Lower-middle median: always an observed value. [1,2,3,4] -> 2, [1,2,3] -> 2."""
    ordered = sorted(finite_values(values))
    if not ordered:
        return None
    return ordered[(len(ordered) - 1) // 2]


def median_low_by(items: Sequence[T], key: Callable[[T], float]) -> Optional[T]:
    """Item whose key is the lower-middle median; stable, so ties keep input order."""
    if not items:
        return None
    ordered = sorted(items, key=key)
    return ordered[(len(ordered) - 1) // 2]
