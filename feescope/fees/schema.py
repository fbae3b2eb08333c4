"""
Publishability check for snapshot entries.

Accepts the model objects or their wire dicts, so persistence writers can
run it on JSON they read back.
"""
from __future__ import annotations

import math
from typing import Any, Mapping, Union

from ..models import FeeStatus, Snapshot, ValidatedFee

REQUIRED_FIELDS = ("feeNative", "feeUSD", "priceUSD", "speedSec", "status", "updated")
NUMERIC_FIELDS = ("feeNative", "feeUSD", "priceUSD", "speedSec")
PUBLISHABLE = {FeeStatus.OK.value, FeeStatus.ESTIMATED.value}


def _finite(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def is_valid_entry(entry: Union[ValidatedFee, Mapping[str, Any], None]) -> bool:
    """All fields present and finite, status ``ok`` or ``estimated``."""
    if entry is None:
        return False
    data = entry.to_dict() if isinstance(entry, ValidatedFee) else entry
    if any(data.get(k) is None for k in REQUIRED_FIELDS):
        return False
    if data["status"] not in PUBLISHABLE:
        return False
    return all(_finite(data[k]) for k in NUMERIC_FIELDS)


def validate_snapshot(snapshot: Union[Snapshot, Mapping[str, Any], None]) -> bool:
    """True when the snapshot is well formed and every chain entry is publishable."""
    if snapshot is None:
        return False
    data = snapshot.to_dict() if isinstance(snapshot, Snapshot) else snapshot
    if not isinstance(data, Mapping) or not data.get("generatedAt"):
        return False
    chains = data.get("chains")
    if not isinstance(chains, Mapping):
        return False
    return all(is_valid_entry(entry) for entry in chains.values())
