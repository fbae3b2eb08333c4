"""Timestamps: ISO parsing, deterministic clock, freshness window."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from feescope.timeutils import is_fresh, now_utc, now_utc_iso, parse_iso, to_iso

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_parse_iso_variants():
    assert parse_iso("2026-01-01T00:00:00Z") == T0
    assert parse_iso("2026-01-01T01:00:00+01:00") == T0
    assert parse_iso("2026-01-01T00:00:00") == T0
    assert parse_iso(datetime(2026, 1, 1)) == T0
    assert parse_iso("") is None
    assert parse_iso("yesterday") is None
    assert parse_iso(None) is None


def test_to_iso_uses_z_suffix():
    assert to_iso(T0) == "2026-01-01T00:00:00Z"


def test_deterministic_clock(monkeypatch):
    monkeypatch.setenv("FEESCOPE_DETERMINISTIC_TIME", "2026-01-01T00:00:00Z")
    assert now_utc() == T0
    assert now_utc_iso() == "2026-01-01T00:00:00Z"


def test_invalid_deterministic_time_falls_back_to_clock(monkeypatch):
    monkeypatch.setenv("FEESCOPE_DETERMINISTIC_TIME", "not-a-time")
    assert now_utc().tzinfo is not None


def test_freshness_window_is_inclusive():
    window = timedelta(hours=3)
    assert is_fresh(T0, window, now=T0 + window)
    assert not is_fresh(T0, window, now=T0 + window + timedelta(seconds=1))
    assert is_fresh("2026-01-01T00:00:00Z", window, now=T0)
    assert not is_fresh("garbage", window, now=T0)
    assert not is_fresh(None, window, now=T0)
