"""Fee normalization, consensus, fallback synthesis and speed heuristics."""

from __future__ import annotations

from .consensus import FRESHNESS_WINDOW, ConsensusResult, enforce_range, normalize_candidates
from .fallback import fallback_candidate
from .normalize import attach_usd
from .schema import is_valid_entry, validate_snapshot
from .speed import calc_speed
from .stats import median, median_low

__all__ = [
    "FRESHNESS_WINDOW",
    "ConsensusResult",
    "attach_usd",
    "calc_speed",
    "enforce_range",
    "fallback_candidate",
    "is_valid_entry",
    "median",
    "median_low",
    "normalize_candidates",
    "validate_snapshot",
]
