"""ChainConfig immutability, ChainRegistry lookup and config-driven registry building."""

from __future__ import annotations

import dataclasses

import pytest

from feescope.chains import DEFAULT_CHAINS, ChainConfig, ChainRegistry, apply_override, build_default_chain_registry
from feescope.core.errors import UnknownChain, UnsupportedChainType
from feescope.models import ChainType, UsdRange
from feescope.providers.gas import EvmGasProvider, RollupGasProvider, UtxoFeeProvider
from feescope.providers.registry import ProviderRegistry

BUILTIN = {c.key: c for c in DEFAULT_CHAINS}
EXPECTED_KEYS = ["btc", "eth", "bsc", "polygon", "avax", "sol", "xrp", "arb", "op", "base"]


def _cfg(enabled=None, overrides=None) -> dict:
    return {"chains": {"enabled": enabled or [], "overrides": overrides or {}}}


class TestChainConfig:
    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            BUILTIN["eth"].symbol = "WETH"  # type: ignore[misc]

    def test_aux_read_only(self):
        with pytest.raises(TypeError):
            BUILTIN["eth"].aux["gas_limit"] = 1  # type: ignore[index]

    def test_single_endpoint_string_becomes_tuple(self):
        chain = ChainConfig("x", "X", ChainType.EVM, UsdRange(0.1, 1.0), endpoints="https://rpc.example")
        assert chain.endpoints == ("https://rpc.example",)

    def test_usd_ranges_are_ordered(self):
        for chain in DEFAULT_CHAINS:
            assert 0 < chain.usd_range.min_usd < chain.usd_range.max_usd, chain.key

    def test_rollups_are_priced_in_eth(self):
        rollups = [c for c in DEFAULT_CHAINS if c.type is ChainType.ROLLUP]
        assert {c.key for c in rollups} == {"arb", "op", "base"}
        assert all(c.symbol == "ETH" for c in rollups)


class TestChainRegistry:
    def test_get_unknown_lists_available(self):
        reg = ChainRegistry([BUILTIN["btc"], BUILTIN["eth"]])
        with pytest.raises(UnknownChain, match="Available"):
            reg.get("doge")

    def test_unknown_chain_is_also_key_error(self):
        with pytest.raises(KeyError):
            ChainRegistry([]).get("doge")

    def test_duplicate_key_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ChainRegistry([BUILTIN["btc"], BUILTIN["btc"]])

    def test_subset_keeps_requested_order(self):
        reg = ChainRegistry(DEFAULT_CHAINS).subset(["sol", "btc"])
        assert reg.keys() == ["sol", "btc"]
        assert len(reg) == 2
        assert "sol" in reg and "eth" not in reg


class TestBuildDefaultRegistry:
    def test_every_builtin_chain_gets_a_strategy(self):
        reg = build_default_chain_registry(_cfg())

        assert reg.keys() == EXPECTED_KEYS
        assert isinstance(reg.get("btc").provider, UtxoFeeProvider)
        assert isinstance(reg.get("polygon").provider, EvmGasProvider)
        assert reg.get("arb").provider is reg.get("base").provider
        assert isinstance(reg.get("op").provider, RollupGasProvider)

    def test_enabled_list_restricts_and_orders(self):
        reg = build_default_chain_registry(_cfg(enabled=["xrp", "btc", "doge"]))
        assert reg.keys() == ["xrp", "btc"]

    def test_override_patches_builtin_chain(self):
        reg = build_default_chain_registry(
            _cfg(overrides={"eth": {"max_usd": 80, "rpc": "https://rpc.example/eth", "gas_limit": 21000}})
        )
        eth = reg.get("eth")

        assert eth.usd_range == UsdRange(0.01, 80.0)
        assert eth.endpoints == ("https://rpc.example/eth",)
        assert eth.aux["gas_limit"] == 21000
        assert "oracle_url" in eth.aux

    def test_override_defines_new_chain(self):
        reg = build_default_chain_registry(
            _cfg(
                enabled=["ftm"],
                overrides={
                    "ftm": {
                        "symbol": "ftm",
                        "type": "evm",
                        "min_usd": 0.0001,
                        "max_usd": 0.5,
                        "rpc": ["https://rpc.ftm.tools"],
                        "fixed_gas_gwei": 50,
                    }
                },
            )
        )
        ftm = reg.get("ftm")

        assert ftm.symbol == "FTM"
        assert ftm.type is ChainType.EVM
        assert ftm.aux["fixed_gas_gwei"] == 50
        assert isinstance(ftm.provider, EvmGasProvider)

    def test_incomplete_new_chain_rejected(self):
        with pytest.raises(ValueError, match="lacks"):
            apply_override(None, "ftm", {"symbol": "FTM"})

    def test_unknown_chain_type_rejected(self):
        with pytest.raises(UnsupportedChainType):
            apply_override(BUILTIN["eth"], "eth", {"type": "dag"})

    def test_missing_strategy_for_type(self):
        with pytest.raises(UnsupportedChainType):
            build_default_chain_registry(_cfg(enabled=["btc"]), providers=ProviderRegistry())
