"""
Single source for "now" time. Supports deterministic mode for tests via
FEESCOPE_DETERMINISTIC_TIME (ISO format, e.g. 2026-01-01T00:00:00Z).
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Union


def parse_iso(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def now_utc() -> datetime:
    """
    Return current UTC time.
    If env FEESCOPE_DETERMINISTIC_TIME is set, return that value instead.
    """
    fixed = os.environ.get("FEESCOPE_DETERMINISTIC_TIME", "").strip()
    if fixed:
        parsed = parse_iso(fixed)
        if parsed is not None:
            return parsed
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def now_utc_iso() -> str:
    return to_iso(now_utc())


def is_fresh(
    ts: Union[str, datetime, None],
    max_age: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    """True when ``ts`` parses and is no older than ``max_age``."""
    dt = parse_iso(ts)
    if dt is None:
        return False
    ref = now or now_utc()
    return (ref - dt) <= max_age
