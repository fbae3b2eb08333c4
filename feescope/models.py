"""
Data contracts for the fee snapshot engine.

Candidates flow one way: a gas provider emits FeeCandidate, the normalizer
turns it into PricedCandidate, consensus picks one and the orchestrator
publishes a ValidatedFee per chain inside an immutable Snapshot.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .timeutils import to_iso


class ChainType(enum.Enum):
    """Fee model of a chain; selects the gas candidate strategy."""

    UTXO = "utxo"
    EVM = "evm"
    ROLLUP = "rollup"
    ACCOUNT = "account"
    LEDGER = "ledger"


class FeeStatus(enum.Enum):
    """Published status of one chain entry."""

    OK = "ok"
    ESTIMATED = "estimated"
    API_FAILED = "api-failed"


@dataclass(frozen=True)
class UsdRange:
    """Closed range of plausible USD fees for a chain."""

    min_usd: float
    max_usd: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.min_usd) and math.isfinite(self.max_usd)):
            raise ValueError(f"UsdRange bounds must be finite: {self.min_usd}, {self.max_usd}")
        if self.min_usd > self.max_usd:
            raise ValueError(f"UsdRange min {self.min_usd} > max {self.max_usd}")

    def contains(self, value: Optional[float]) -> bool:
        return value is not None and math.isfinite(value) and self.min_usd <= value <= self.max_usd

    def clamp(self, value: Optional[float]) -> Optional[float]:
        """Snap into [min, max]; None for missing or non-finite input."""
        if value is None or not math.isfinite(value):
            return None
        if value < self.min_usd:
            return self.min_usd
        if value > self.max_usd:
            return self.max_usd
        return value


@dataclass(frozen=True)
class FeeCandidate:
    """One provider's raw native-fee observation for a chain."""

    chain_key: str
    provider: str
    fee_native: float
    timestamp: datetime
    raw_units: Dict[str, Any] = field(default_factory=dict)
    is_fallback: bool = False


@dataclass(frozen=True)
class PricedCandidate(FeeCandidate):
    """FeeCandidate with its USD value; fee_usd is None when no usable price exists."""

    price_usd: Optional[float] = None
    fee_usd: Optional[float] = None

    @classmethod
    def from_candidate(
        cls,
        candidate: FeeCandidate,
        price_usd: Optional[float],
        fee_usd: Optional[float],
        **changes: Any,
    ) -> PricedCandidate:
        values = {f.name: getattr(candidate, f.name) for f in fields(FeeCandidate)}
        values.update(changes)
        return cls(**values, price_usd=price_usd, fee_usd=fee_usd)


@dataclass(frozen=True)
class ValidatedFee:
    """Published fee entry for one chain."""

    chain_key: str
    fee_native: Optional[float]
    fee_usd: Optional[float]
    price_usd: Optional[float]
    status: FeeStatus
    speed_sec: Optional[int]
    updated: str
    provider: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feeNative": self.fee_native,
            "feeUSD": self.fee_usd,
            "priceUSD": self.price_usd,
            "speedSec": self.speed_sec,
            "status": self.status.value,
            "updated": self.updated,
            "provider": self.provider,
        }

    @classmethod
    def failed(
        cls,
        chain_key: str,
        updated: datetime,
        *,
        price_usd: Optional[float] = None,
        fee_native: Optional[float] = None,
        provider: Optional[str] = None,
    ) -> ValidatedFee:
        return cls(
            chain_key=chain_key,
            fee_native=fee_native,
            fee_usd=None,
            price_usd=price_usd,
            status=FeeStatus.API_FAILED,
            speed_sec=None,
            updated=to_iso(updated),
            provider=provider,
        )


@dataclass(frozen=True)
class Snapshot:
    """Multi-chain fee snapshot; chains is a read-only mapping."""

    generated_at: str
    chains: Mapping[str, ValidatedFee] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "chains", MappingProxyType(dict(self.chains)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "chains": {key: entry.to_dict() for key, entry in self.chains.items()},
        }


__all__ = [
    "ChainType",
    "FeeCandidate",
    "FeeStatus",
    "PricedCandidate",
    "Snapshot",
    "UsdRange",
    "ValidatedFee",
]
