"""Fake providers and fixtures for price, gas and snapshot tests (no live network)."""

from .providers import (
    FakeGasProvider,
    FakeGasProviderAlwaysFail,
    FakeSlowGasProvider,
    FakeSlowSpotProvider,
    FakeSpotProvider,
    FakeSpotProviderAlwaysFail,
    FakeSpotProviderFailNThenSucceed,
    make_candidate,
)

__all__ = [
    "FakeGasProvider",
    "FakeGasProviderAlwaysFail",
    "FakeSlowGasProvider",
    "FakeSlowSpotProvider",
    "FakeSpotProvider",
    "FakeSpotProviderAlwaysFail",
    "FakeSpotProviderFailNThenSucceed",
    "make_candidate",
]
