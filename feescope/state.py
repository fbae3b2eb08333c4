"""
Caller-owned state objects for fetch observability and last-known-good prices.

Nothing in the engine keeps module-level mutable state. A long-running caller
(HTTP handler, scheduler) creates one FetchMeta / PriceCache and passes them
into the orchestrator; a one-shot caller can omit both.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .providers.base import ProviderHealth
from .timeutils import now_utc_iso

PRICE_CACHE_MAX_AGE_S = 30 * 60.0
MAX_RECENT_FAILURES = 5


@dataclass(frozen=True)
class FetchFailure:
    key: str
    message: str
    at: str


class FetchMeta:
    """
    Record of recent fetch failures, cache usage and per-provider health.

    Only touched from the event loop thread, so no locking.
    """

    def __init__(self) -> None:
        self.last_fetch_error: Optional[str] = None
        self.last_fetch_error_at: Optional[str] = None
        self.last_fetch_failure_key: Optional[str] = None
        self.fetch_failures: List[FetchFailure] = []
        self.cache_used = False
        self.cache_age_minutes: Optional[int] = None
        self.cache_key: Optional[str] = None
        self.last_cache_used_at: Optional[str] = None
        self._health: Dict[str, ProviderHealth] = {}

    def record_fetch_error(self, key: str, error: Any) -> None:
        """Keep the most recent failure per key, newest first, capped at MAX_RECENT_FAILURES."""
        message = str(error)[:500]
        at = now_utc_iso()
        self.last_fetch_error = message
        self.last_fetch_error_at = at
        self.last_fetch_failure_key = key
        kept = [f for f in self.fetch_failures if f.key != key]
        self.fetch_failures = [FetchFailure(key=key, message=message, at=at), *kept][:MAX_RECENT_FAILURES]

    def record_cache_usage(self, key: str, age_s: float) -> None:
        self.cache_used = True
        self.cache_age_minutes = round(age_s / 60.0)
        self.cache_key = key
        self.last_cache_used_at = now_utc_iso()

    def health(self, provider_name: str) -> ProviderHealth:
        if provider_name not in self._health:
            self._health[provider_name] = ProviderHealth(provider_name=provider_name)
        return self._health[provider_name]

    def record_provider_success(self, provider_name: str) -> None:
        self.health(provider_name).record_success()

    def record_provider_failure(self, provider_name: str, error: Any) -> None:
        self.health(provider_name).record_failure(str(error))

    def get_health(self) -> Dict[str, ProviderHealth]:
        """Return health status for every provider seen so far."""
        return dict(self._health)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lastFetchError": self.last_fetch_error,
            "lastFetchErrorAt": self.last_fetch_error_at,
            "lastFetchFailureKey": self.last_fetch_failure_key,
            "fetchFailures": [
                {"key": f.key, "message": f.message, "at": f.at} for f in self.fetch_failures
            ],
            "cacheUsed": self.cache_used,
            "cacheAgeMinutes": self.cache_age_minutes,
            "cacheKey": self.cache_key,
            "lastCacheUsedAt": self.last_cache_used_at,
            "providers": {
                name: {"status": h.status.value, "failCount": h.fail_count, "lastError": h.last_error}
                for name, h in self._health.items()
            },
        }


class PriceCache:
    """
    Last-known-good USD prices with an explicit TTL.

    Consulted only after every live price source failed, so a transient
    outage degrades to a slightly old price instead of an api-failed chain.
    """

    def __init__(self, max_age_seconds: float = PRICE_CACHE_MAX_AGE_S) -> None:
        self._max_age_s = max_age_seconds
        self._store: Dict[str, Tuple[float, float]] = {}

    def get_with_age(self, key: str) -> Optional[Tuple[float, float]]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, timestamp = entry
        age = time.monotonic() - timestamp
        if age > self._max_age_s:
            return None
        return value, age

    def get(self, key: str) -> Optional[float]:
        hit = self.get_with_age(key)
        return hit[0] if hit is not None else None

    def put(self, key: str, value: float) -> None:
        self._store[key] = (value, time.monotonic())
