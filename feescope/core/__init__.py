"""
Stable facade: exception taxonomy only. Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import (
    FeeScopeError,
    PriceUnavailable,
    ProviderUnavailable,
    UnknownChain,
    UnsupportedChainType,
    ValidationFailed,
)

__all__ = [
    "FeeScopeError",
    "PriceUnavailable",
    "ProviderUnavailable",
    "UnknownChain",
    "UnsupportedChainType",
    "ValidationFailed",
]
