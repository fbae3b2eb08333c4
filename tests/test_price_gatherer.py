"""
PriceGatherer: concurrent sources, median of valid quotes, per-source
failure isolation, last-known-good fallback.
"""

from __future__ import annotations

import asyncio
import time

import pytest

from feescope.core.errors import PriceUnavailable
from feescope.providers.base import ProviderStatus
from feescope.providers.gatherer import PriceGatherer
from feescope.state import FetchMeta, PriceCache

from tests.fakes import (
    FakeSlowSpotProvider,
    FakeSpotProvider,
    FakeSpotProviderAlwaysFail,
)


def fetch(gatherer: PriceGatherer, symbol: str) -> float:
    return asyncio.run(gatherer.fetch_price_usd(symbol))


class TestMedian:
    def test_odd_count_takes_middle(self):
        g = PriceGatherer([
            FakeSpotProvider("a", {"ETH": 1990.0}),
            FakeSpotProvider("b", {"ETH": 2000.0}),
            FakeSpotProvider("c", {"ETH": 2500.0}),
        ])
        assert fetch(g, "ETH") == 2000.0

    def test_even_count_averages_middle_pair(self):
        g = PriceGatherer([
            FakeSpotProvider("a", {"ETH": 1990.0}),
            FakeSpotProvider("b", {"ETH": 2010.0}),
        ])
        assert fetch(g, "ETH") == pytest.approx(2000.0)

    def test_all_sources_queried(self):
        sources = [FakeSpotProvider(n) for n in ("a", "b", "c", "d")]
        fetch(PriceGatherer(sources), "BTC")
        assert [s.call_count for s in sources] == [1, 1, 1, 1]

    def test_symbol_is_uppercased(self):
        g = PriceGatherer([FakeSpotProvider("a", {"SOL": 150.0})])
        assert fetch(g, "sol") == 150.0


class TestQuotes:
    def test_valid_quotes_in_priority_order_with_failures_reported(self):
        g = PriceGatherer([
            FakeSpotProvider("first", {"BTC": 50100.0}),
            FakeSpotProviderAlwaysFail("down"),
            FakeSpotProvider("bad", {"BTC": 0.0}),
            FakeSpotProvider("last", {"BTC": 49900.0}),
        ])
        errors = []
        quotes = asyncio.run(g.fetch_quotes("BTC", errors))

        assert [q.provider_name for q in quotes] == ["first", "last"]
        assert [q.price_usd for q in quotes] == [50100.0, 49900.0]
        assert len(errors) == 2
        assert any(e.startswith("down:") for e in errors)
        assert any(e.startswith("bad:") for e in errors)


class TestFailureIsolation:
    def test_failing_source_excluded(self):
        g = PriceGatherer([
            FakeSpotProviderAlwaysFail("down"),
            FakeSpotProvider("up", {"BTC": 50000.0}),
        ])
        assert fetch(g, "BTC") == 50000.0

    @pytest.mark.parametrize("bad", [0.0, -5.0, float("nan"), float("inf")])
    def test_unusable_values_ignored(self, bad):
        g = PriceGatherer([
            FakeSpotProvider("bad", {"BTC": bad}),
            FakeSpotProvider("good", {"BTC": 50000.0}),
        ])
        assert fetch(g, "BTC") == 50000.0

    def test_slow_source_does_not_block(self):
        g = PriceGatherer(
            [
                FakeSlowSpotProvider("slow", delay_s=1.0, prices={"BTC": 1.0}),
                FakeSpotProvider("fast", {"BTC": 50000.0}),
            ],
            per_timeout_s=0.2,
        )

        async def timed():
            started = time.monotonic()
            price = await g.fetch_price_usd("BTC")
            return price, time.monotonic() - started

        price, elapsed = asyncio.run(timed())
        assert price == 50000.0
        assert elapsed < 0.9

    def test_all_fail_raises_price_unavailable(self):
        g = PriceGatherer([FakeSpotProviderAlwaysFail("x"), FakeSpotProviderAlwaysFail("y")])
        with pytest.raises(PriceUnavailable) as excinfo:
            fetch(g, "ETH")
        assert excinfo.value.symbol == "ETH"
        assert len(excinfo.value.errors) == 2

    def test_no_sources_raises(self):
        with pytest.raises(PriceUnavailable):
            fetch(PriceGatherer([]), "ETH")


class TestStateObjects:
    def test_health_recorded_in_fetch_meta(self):
        meta = FetchMeta()
        g = PriceGatherer(
            [FakeSpotProviderAlwaysFail("down"), FakeSpotProvider("up")],
            fetch_meta=meta,
        )
        fetch(g, "BTC")
        fetch(g, "BTC")
        health = meta.get_health()
        assert health["down"].fail_count == 2
        assert health["down"].status == ProviderStatus.DEGRADED
        assert health["up"].status == ProviderStatus.OK

    def test_last_known_good_used_after_total_outage(self):
        meta = FetchMeta()
        cache = PriceCache()
        up = FakeSpotProvider("up", {"ETH": 2000.0})
        assert fetch(PriceGatherer([up], cache=cache), "ETH") == 2000.0

        g = PriceGatherer([FakeSpotProviderAlwaysFail("down")], fetch_meta=meta, cache=cache)
        assert fetch(g, "ETH") == 2000.0
        assert meta.cache_used is True
        assert meta.cache_key == "price:ETH"
        assert meta.fetch_failures[0].key == "price:ETH"

    def test_expired_cache_not_used(self):
        cache = PriceCache(max_age_seconds=0.0)
        cache.put("price:ETH", 2000.0)
        time.sleep(0.01)
        g = PriceGatherer([FakeSpotProviderAlwaysFail("down")], cache=cache)
        with pytest.raises(PriceUnavailable):
            fetch(g, "ETH")
