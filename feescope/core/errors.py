"""
Shared exception types for feescope.

Errors are recovered at the smallest scope that can handle them: provider
strategies swallow ProviderUnavailable, the orchestrator converts the rest
into an ``api-failed`` chain entry. Nothing here escapes generate_snapshot().
"""

from __future__ import annotations


class FeeScopeError(Exception):
    """Base exception for feescope; catch this for any package-raised error."""

    pass


class ProviderUnavailable(FeeScopeError):
    """One upstream call failed: network error, timeout, non-2xx or malformed payload."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class PriceUnavailable(FeeScopeError):
    """Every price source failed for a symbol."""

    def __init__(self, symbol: str, errors: list[str] | None = None) -> None:
        self.symbol = symbol
        self.errors = list(errors or [])
        detail = "; ".join(self.errors) if self.errors else "no usable price"
        super().__init__(f"All price sources failed for {symbol}: {detail}")


class ValidationFailed(FeeScopeError):
    """No candidate survived filtering for a chain."""

    def __init__(self, chain_key: str, reason: str = "no usable candidate") -> None:
        self.chain_key = chain_key
        super().__init__(f"{chain_key}: {reason}")


class UnknownChain(FeeScopeError, KeyError):
    """Chain key is not present in the registry."""

    def __init__(self, chain_key: str, available: list[str] | None = None) -> None:
        self.chain_key = chain_key
        msg = f"Unknown chain '{chain_key}'"
        if available:
            msg += f". Available: {available}"
        super().__init__(msg)

    def __str__(self) -> str:
        return str(self.args[0])


class UnsupportedChainType(FeeScopeError):
    """No gas candidate strategy is registered for a chain type."""

    def __init__(self, chain_type: object) -> None:
        self.chain_type = chain_type
        super().__init__(f"No gas provider registered for chain type {chain_type!r}")


__all__ = [
    "FeeScopeError",
    "PriceUnavailable",
    "ProviderUnavailable",
    "UnknownChain",
    "UnsupportedChainType",
    "ValidationFailed",
]
