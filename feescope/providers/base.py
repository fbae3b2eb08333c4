"""
Provider interfaces and data contracts.

Two kinds of upstream collaborators feed the engine:
- SpotPriceProvider: one USD price source (exchange or aggregator API).
- GasCandidateProvider: one strategy per chain type that queries several
  independent endpoints and emits zero or more FeeCandidate records.

Price quotes are frozen dataclasses; provider health is the only mutable
record and lives in caller-owned state (see feescope.state.FetchMeta).
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

from ..models import FeeCandidate
from ..timeutils import now_utc_iso

if TYPE_CHECKING:
    from ..chains import ChainConfig


class ProviderStatus(enum.Enum):
    """Health status of a data provider."""

    OK = "OK"
    DEGRADED = "DEGRADED"
    DOWN = "DOWN"


@dataclass(frozen=True)
class SpotQuote:
    """Immutable USD price quote from one price source."""

    symbol: str
    price_usd: float
    provider_name: str
    fetched_at_utc: str
    status: ProviderStatus = ProviderStatus.OK
    error_message: Optional[str] = None

    def is_valid(self) -> bool:
        return (
            self.price_usd is not None
            and math.isfinite(self.price_usd)
            and self.price_usd > 0
            and self.status == ProviderStatus.OK
        )


def make_quote(symbol: str, price: float, provider_name: str) -> SpotQuote:
    """Build a quote, downgrading non-positive or non-finite prices to DEGRADED."""
    ts = now_utc_iso()
    if not math.isfinite(price) or price <= 0:
        return SpotQuote(
            symbol=symbol.upper(),
            price_usd=price,
            provider_name=provider_name,
            fetched_at_utc=ts,
            status=ProviderStatus.DEGRADED,
            error_message="Non-positive price",
        )
    return SpotQuote(
        symbol=symbol.upper(),
        price_usd=price,
        provider_name=provider_name,
        fetched_at_utc=ts,
    )


@dataclass
class ProviderHealth:
    """Mutable health state for a single provider instance."""

    provider_name: str
    status: ProviderStatus = ProviderStatus.OK
    last_ok_at: Optional[str] = None
    fail_count: int = 0
    last_error: Optional[str] = None

    def record_success(self) -> None:
        self.status = ProviderStatus.OK
        self.fail_count = 0
        self.last_ok_at = now_utc_iso()
        self.last_error = None

    def record_failure(self, error: str) -> None:
        self.fail_count += 1
        self.last_error = error[:500]
        if self.fail_count >= 5:
            self.status = ProviderStatus.DOWN
        elif self.fail_count >= 2:
            self.status = ProviderStatus.DEGRADED


@runtime_checkable
class SpotPriceProvider(Protocol):
    """Protocol for USD price sources. get_spot is blocking; the gatherer runs it off-loop."""

    @property
    def provider_name(self) -> str: ...

    def get_spot(self, symbol: str) -> SpotQuote:
        """Fetch current USD price for a symbol (e.g., 'BTC', 'ETH', 'SOL')."""
        ...


@runtime_checkable
class GasCandidateProvider(Protocol):
    """Protocol for per-chain-type fee candidate strategies. Must not raise."""

    @property
    def provider_name(self) -> str: ...

    async def fetch_candidates(
        self,
        chain: "ChainConfig",
        l1_gas_price_gwei: Optional[float] = None,
    ) -> List[FeeCandidate]:
        """Query independent endpoints and return every usable candidate."""
        ...
