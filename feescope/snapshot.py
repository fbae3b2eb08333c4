"""
Snapshot orchestration: every configured chain, priced and validated.

Two phases:
1. Resolve the base-layer (L1) gas price once, as the median of the L1
   chain's measured gas-price candidates. Rollups need it for their data
   posting cost; a failure here only means rollups fall back.
2. Build every chain concurrently: USD price and gas candidates, fallback
   synthesis when nothing usable came back, consensus, speed estimate.

Failures are contained at the chain boundary as ``api-failed`` entries and
generate_snapshot() never raises: worst case it returns an empty snapshot.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from . import config
from .chains import ChainConfig, ChainRegistry, build_default_chain_registry
from .core.errors import FeeScopeError, PriceUnavailable, UnsupportedChainType, ValidationFailed
from .fees.consensus import FRESHNESS_WINDOW, ConsensusResult, enforce_range, normalize_candidates
from .fees.fallback import fallback_candidate
from .fees.speed import calc_speed
from .fees.stats import median, median_low_by
from .models import ChainType, FeeCandidate, FeeStatus, Snapshot, ValidatedFee
from .providers.defaults import create_price_gatherer
from .providers.gatherer import PriceGatherer
from .providers.resilience import DEFAULT_POOL_WORKERS, blocking_pool
from .state import FetchMeta, PriceCache
from .timeutils import is_fresh, now_utc, now_utc_iso, to_iso

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_TIMEOUT_S = 20.0


class SnapshotOrchestrator:
    """
    Two-phase snapshot builder over a ChainRegistry and a PriceGatherer.

    Holds no state between runs; FetchMeta (optional) is the caller's.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        price_gatherer: PriceGatherer,
        *,
        l1_chain_key: str = "eth",
        fetch_meta: Optional[FetchMeta] = None,
        price_retries: int = 1,
        chain_timeout_s: float = DEFAULT_CHAIN_TIMEOUT_S,
        freshness: timedelta = FRESHNESS_WINDOW,
        max_workers: int = DEFAULT_POOL_WORKERS,
    ) -> None:
        self.registry = registry
        self.price_gatherer = price_gatherer
        self.l1_chain_key = l1_chain_key
        self.fetch_meta = fetch_meta
        self.price_retries = max(0, price_retries)
        self.chain_timeout_s = chain_timeout_s
        self.freshness = freshness
        self.max_workers = max_workers

    # -- phase 1 ------------------------------------------------------------

    async def resolve_l1_gas_price(self) -> Optional[float]:
        """Median gas price (gwei) of the L1 chain's measured candidates; None on any failure."""
        if self.l1_chain_key not in self.registry:
            logger.debug("L1 chain '%s' not configured, rollups use fallback L1 pricing", self.l1_chain_key)
            return None
        chain = self.registry.get(self.l1_chain_key)
        if chain.provider is None:
            return None
        try:
            candidates = await asyncio.wait_for(
                chain.provider.fetch_candidates(chain), self.chain_timeout_s
            )
        except asyncio.TimeoutError:
            logger.warning("L1 gas price: %s timed out after %.1fs", chain.key, self.chain_timeout_s)
            return None
        except Exception as exc:
            logger.warning("L1 gas price: %s failed: %s", chain.key, exc)
            return None

        l1 = median(
            c.raw_units.get("gas_price_gwei")
            for c in candidates
            if not c.is_fallback
        )
        if l1 is None:
            logger.warning("L1 gas price unavailable, rollups use fallback L1 pricing")
        else:
            logger.info("L1 gas price %.4g gwei from %d candidate(s)", l1, len(candidates))
        return l1

    # -- phase 2 ------------------------------------------------------------

    async def _fetch_price(self, symbol: str) -> float:
        attempts = self.price_retries + 1
        last: Optional[PriceUnavailable] = None
        for attempt in range(1, attempts + 1):
            try:
                return await self.price_gatherer.fetch_price_usd(symbol)
            except PriceUnavailable as exc:
                last = exc
                logger.debug("price %s: attempt %d/%d failed", symbol, attempt, attempts)
        raise last  # type: ignore[misc]

    async def _price_or_none(self, chain: ChainConfig, price_task: "asyncio.Future[float]") -> Optional[float]:
        try:
            return await asyncio.shield(price_task)
        except PriceUnavailable as exc:
            logger.warning("%s: %s", chain.key, exc)
            if self.fetch_meta is not None:
                self.fetch_meta.record_fetch_error(f"price:{chain.symbol}", exc)
            return None

    def _consensus(self, chain: ChainConfig, candidates: List[FeeCandidate], price: float) -> ConsensusResult:
        now = now_utc()
        try:
            return normalize_candidates(chain, candidates, price, now=now, freshness=self.freshness)
        except ValidationFailed as exc:
            if any(c.is_fallback for c in candidates):
                raise
            logger.warning("%s: %s, using documented fallback", chain.key, exc)
            return normalize_candidates(
                chain, [fallback_candidate(chain)], price, now=now, freshness=self.freshness
            )

    def _best_native(self, candidates: List[FeeCandidate]) -> Optional[FeeCandidate]:
        now = now_utc()
        fresh = [c for c in candidates if c.fee_native > 0 and is_fresh(c.timestamp, self.freshness, now)]
        measured = [c for c in fresh if not c.is_fallback]
        return median_low_by(measured or fresh, key=lambda c: c.fee_native)

    async def _build(
        self,
        chain: ChainConfig,
        l1_gas_price_gwei: Optional[float],
        price_task: "asyncio.Future[float]",
    ) -> ValidatedFee:
        if chain.provider is None:
            raise UnsupportedChainType(chain.type.value)

        l1 = l1_gas_price_gwei if chain.type is ChainType.ROLLUP else None
        price, candidates = await asyncio.gather(
            self._price_or_none(chain, price_task),
            chain.provider.fetch_candidates(chain, l1),
        )

        if not candidates:
            logger.warning("%s: no gas candidates, synthesizing documented fallback", chain.key)
            candidates = [fallback_candidate(chain)]

        if price is None:
            best = self._best_native(candidates)
            return ValidatedFee.failed(
                chain.key,
                now_utc(),
                fee_native=best.fee_native if best is not None else None,
                provider=best.provider if best is not None else None,
            )

        result = self._consensus(chain, candidates, price)
        primary = result.primary
        return ValidatedFee(
            chain_key=chain.key,
            fee_native=primary.fee_native,
            fee_usd=enforce_range(chain, primary.fee_usd),
            price_usd=price,
            status=result.status,
            speed_sec=calc_speed(chain.type, primary, chain.aux.get("speed_s")),
            updated=to_iso(primary.timestamp),
            provider=primary.provider,
        )

    async def build_chain(
        self,
        chain_key: str,
        l1_gas_price_gwei: Optional[float],
        price_tasks: Dict[str, "asyncio.Future[float]"],
    ) -> ValidatedFee:
        """Build one chain entry; every failure becomes an ``api-failed`` entry."""
        try:
            chain = self.registry.get(chain_key)
            if chain.symbol not in price_tasks:
                price_tasks[chain.symbol] = asyncio.ensure_future(self._fetch_price(chain.symbol))
            return await asyncio.wait_for(
                self._build(chain, l1_gas_price_gwei, price_tasks[chain.symbol]),
                self.chain_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("%s: build timed out after %.1fs", chain_key, self.chain_timeout_s)
            error: object = f"timeout after {self.chain_timeout_s:.1f}s"
        except FeeScopeError as exc:
            logger.warning("%s: %s", chain_key, exc)
            error = exc
        except Exception as exc:
            logger.exception("%s: unexpected error while building chain", chain_key)
            error = exc
        if self.fetch_meta is not None:
            self.fetch_meta.record_fetch_error(f"chain:{chain_key}", error)
        return ValidatedFee.failed(chain_key, now_utc())

    async def run(self, chain_keys: Optional[Iterable[str]] = None) -> Snapshot:
        with blocking_pool(self.max_workers):
            return await self._run(chain_keys)

    async def _run(self, chain_keys: Optional[Iterable[str]]) -> Snapshot:
        generated_at = now_utc()
        keys = list(chain_keys) if chain_keys is not None else self.registry.keys()

        l1 = await self.resolve_l1_gas_price()

        price_tasks: Dict[str, "asyncio.Future[float]"] = {}
        try:
            entries = await asyncio.gather(
                *(self.build_chain(key, l1, price_tasks) for key in keys)
            )
        finally:
            for task in price_tasks.values():
                if not task.done():
                    task.cancel()
            # retrieve results so abandoned price tasks don't warn
            for task in price_tasks.values():
                if task.done() and not task.cancelled():
                    task.exception()

        ok = sum(1 for e in entries if e.status is not FeeStatus.API_FAILED)
        logger.info("Snapshot: %d/%d chains priced", ok, len(entries))
        return Snapshot(generated_at=to_iso(generated_at), chains=dict(zip(keys, entries)))


def empty_snapshot() -> Snapshot:
    return Snapshot(generated_at=now_utc_iso(), chains={})


async def generate_snapshot(
    chain_keys: Optional[Iterable[str]] = None,
    *,
    registry: Optional[ChainRegistry] = None,
    price_gatherer: Optional[PriceGatherer] = None,
    fetch_meta: Optional[FetchMeta] = None,
    price_cache: Optional[PriceCache] = None,
) -> Snapshot:
    """
    Build a fee snapshot for ``chain_keys`` (default: every configured chain).

    Never raises. Collaborators default to the configured registry and price
    sources; a long-running caller should pass its own FetchMeta and
    PriceCache so observability and last-known-good prices carry over.
    """
    try:
        if registry is None:
            registry = build_default_chain_registry()
        if price_gatherer is None:
            price_gatherer = create_price_gatherer(fetch_meta=fetch_meta, cache=price_cache)
        orchestrator = SnapshotOrchestrator(
            registry,
            price_gatherer,
            l1_chain_key=config.l1_chain_key(),
            fetch_meta=fetch_meta,
            price_retries=config.price_retries(),
            chain_timeout_s=config.chain_timeout_s(),
            freshness=timedelta(hours=config.freshness_hours()),
            max_workers=config.max_workers(),
        )
        return await orchestrator.run(chain_keys)
    except Exception as exc:
        logger.exception("Snapshot generation failed, returning empty snapshot")
        if fetch_meta is not None:
            fetch_meta.record_fetch_error("snapshot", exc)
        return empty_snapshot()


def generate_snapshot_sync(
    chain_keys: Optional[Iterable[str]] = None,
    **kwargs,
) -> Snapshot:
    """Blocking wrapper around generate_snapshot() for scripts and the CLI."""
    return asyncio.run(generate_snapshot(chain_keys, **kwargs))
