"""
Public API surface. Stable facades only.
Canonical entrypoint: import feescope; await feescope.generate_snapshot().
Does not import cli.
"""

from __future__ import annotations

from ._version import __version__
from .chains import ChainConfig, ChainRegistry, build_default_chain_registry
from .fees.schema import is_valid_entry, validate_snapshot
from .models import ChainType, FeeCandidate, FeeStatus, PricedCandidate, Snapshot, UsdRange, ValidatedFee
from .snapshot import SnapshotOrchestrator, generate_snapshot, generate_snapshot_sync
from .state import FetchMeta, PriceCache

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "ChainConfig",
    "ChainRegistry",
    "ChainType",
    "FeeCandidate",
    "FeeStatus",
    "FetchMeta",
    "PriceCache",
    "PricedCandidate",
    "Snapshot",
    "SnapshotOrchestrator",
    "UsdRange",
    "ValidatedFee",
    "build_default_chain_registry",
    "generate_snapshot",
    "generate_snapshot_sync",
    "is_valid_entry",
    "validate_snapshot",
]
