"""
PriceGatherer: one USD price per symbol from several independent sources.

Every source is queried concurrently with its own timeout. All valid quotes
form the sample and the median is returned, so one bad or slow source can
neither block the query nor skew the result. Only when no source produced a
usable value does the gatherer fall back to a caller-owned last-known-good
cache, and failing that raise PriceUnavailable.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from ..core.errors import PriceUnavailable
from ..fees.stats import median
from ..state import FetchMeta, PriceCache
from .base import SpotPriceProvider, SpotQuote
from .resilience import NO_RETRY, RetryConfig, resilient_call

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_TIMEOUT_S = 8.0


class PriceGatherer:
    """
    Median-of-sources USD price lookup.

    Sources are ordered by priority; order only matters for log output since
    all of them are queried at once.
    """

    def __init__(
        self,
        providers: Sequence[SpotPriceProvider],
        *,
        per_timeout_s: float = DEFAULT_SOURCE_TIMEOUT_S,
        retry_config: Optional[RetryConfig] = None,
        fetch_meta: Optional[FetchMeta] = None,
        cache: Optional[PriceCache] = None,
    ) -> None:
        self._providers = list(providers)
        self._per_timeout_s = per_timeout_s
        self._retry_config = retry_config or NO_RETRY
        self._meta = fetch_meta
        self._cache = cache

    @property
    def provider_names(self) -> List[str]:
        return [p.provider_name for p in self._providers]

    async def _quote(self, provider: SpotPriceProvider, symbol: str, errors: List[str]) -> Optional[SpotQuote]:
        name = provider.provider_name
        try:
            quote = await resilient_call(
                provider.get_spot,
                symbol,
                timeout=self._per_timeout_s,
                retry_config=self._retry_config,
            )
        except Exception as exc:
            msg = f"{name}: {type(exc).__name__}: {exc}"
            errors.append(msg)
            logger.debug("price %s: %s", symbol, msg)
            if self._meta is not None:
                self._meta.record_provider_failure(name, exc)
            return None

        if not quote.is_valid():
            msg = f"{name}: invalid quote (price={quote.price_usd})"
            errors.append(msg)
            logger.debug("price %s: %s", symbol, msg)
            if self._meta is not None:
                self._meta.record_provider_failure(name, msg)
            return None

        if self._meta is not None:
            self._meta.record_provider_success(name)
        return quote

    async def fetch_quotes(self, symbol: str, errors: Optional[List[str]] = None) -> List[SpotQuote]:
        """Every valid quote for ``symbol``, in provider priority order; failures append to ``errors``."""
        if errors is None:
            errors = []
        quotes = await asyncio.gather(*(self._quote(p, symbol, errors) for p in self._providers))
        return [q for q in quotes if q is not None]

    async def fetch_price_usd(self, symbol: str) -> float:
        """
        Median USD price across all sources that answered.

        Raises PriceUnavailable when no source (and no cached value) is usable.
        """
        symbol = symbol.upper()
        cache_key = f"price:{symbol}"
        errors: List[str] = []
        quotes = await self.fetch_quotes(symbol, errors)

        price = median(q.price_usd for q in quotes)
        if price is not None:
            logger.debug(
                "price %s: median %.6g from %d/%d sources (%s)",
                symbol, price, len(quotes), len(self._providers),
                ",".join(q.provider_name for q in quotes),
            )
            if self._cache is not None:
                self._cache.put(cache_key, price)
            return price

        detail = "; ".join(errors) if errors else "no price sources configured"
        if self._meta is not None:
            self._meta.record_fetch_error(cache_key, detail)

        if self._cache is not None:
            hit = self._cache.get_with_age(cache_key)
            if hit is not None:
                cached, age_s = hit
                logger.warning(
                    "All price sources failed for %s, using last-known-good %.6g (%.0fs old)",
                    symbol, cached, age_s,
                )
                if self._meta is not None:
                    self._meta.record_cache_usage(cache_key, age_s)
                return cached

        raise PriceUnavailable(symbol, errors)
