"""
Provider architecture for fee snapshot inputs.

Pluggable USD price sources (exchanges and aggregators) and one gas
candidate strategy per chain type. Sources are registered in a
config-driven registry and wrapped with per-call timeouts, retry/backoff
and ordered fallback.
"""

from __future__ import annotations

from .base import (
    GasCandidateProvider,
    ProviderHealth,
    ProviderStatus,
    SpotPriceProvider,
    SpotQuote,
)
from .registry import ProviderRegistry
from .resilience import RetryConfig, gather_results, race_or_fallback, resilient_call

__all__ = [
    "SpotQuote",
    "SpotPriceProvider",
    "GasCandidateProvider",
    "ProviderHealth",
    "ProviderStatus",
    "ProviderRegistry",
    "RetryConfig",
    "gather_results",
    "race_or_fallback",
    "resilient_call",
]
