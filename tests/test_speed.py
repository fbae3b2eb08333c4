"""Speed heuristics per chain type."""

from __future__ import annotations

import pytest

from feescope.chains import DEFAULT_CHAINS
from feescope.fees.speed import calc_speed
from feescope.models import ChainType

from tests.fakes import make_candidate

BUILTIN = {c.key: c for c in DEFAULT_CHAINS}


@pytest.mark.parametrize(
    "sat, expected",
    [(120.0, 30), (60.0, 30), (59.9, 120), (30.0, 120), (29.0, 300), (1.0, 300)],
)
def test_utxo_tiers(sat, expected):
    cand = make_candidate("btc", 0.0001, sat_per_vbyte=sat)
    assert calc_speed(ChainType.UTXO, cand) == expected


def test_utxo_unknown_rate_is_slow():
    assert calc_speed(ChainType.UTXO, make_candidate("btc", 0.0001)) == 300
    assert calc_speed(ChainType.UTXO, None) == 300


def test_evm_constant():
    assert calc_speed(ChainType.EVM, make_candidate("eth", 0.001, gas_price_gwei=400.0)) == 120


@pytest.mark.parametrize("gwei, expected", [(1.5, 15), (1.0, 45), (0.05, 45)])
def test_rollup_by_l2_price(gwei, expected):
    cand = make_candidate("arb", 0.0001, gas_price_gwei=gwei)
    assert calc_speed(ChainType.ROLLUP, cand) == expected


def test_rollup_unknown_is_slow():
    assert calc_speed(ChainType.ROLLUP, make_candidate("op", 0.0001)) == 45


def test_account_and_ledger():
    assert calc_speed(ChainType.ACCOUNT, make_candidate("sol", 5e-6)) == 4
    assert calc_speed(ChainType.LEDGER, make_candidate("xrp", 1e-5)) == 4


def test_configured_speed_overrides_heuristic():
    cand = make_candidate("arb", 0.0001, gas_price_gwei=3.0)
    assert calc_speed(ChainType.ROLLUP, cand, fixed_s=45) == 45
    assert calc_speed(ChainType.ROLLUP, cand) == 15


def test_arbitrum_speed_is_fixed_but_op_and_base_follow_l2_price():
    cand = make_candidate("arb", 0.0001, gas_price_gwei=3.0)
    assert calc_speed(ChainType.ROLLUP, cand, BUILTIN["arb"].aux.get("speed_s")) == 45
    for key in ("op", "base"):
        assert calc_speed(ChainType.ROLLUP, cand, BUILTIN[key].aux.get("speed_s")) == 15
