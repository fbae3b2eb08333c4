"""
USD price sources with mocked HTTP, plus the provider registry that builds
them. No live network calls.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from feescope.core.errors import ProviderUnavailable, UnsupportedChainType
from feescope.models import ChainType
from feescope.providers.aggregators.coingecko import CoinGeckoPriceProvider
from feescope.providers.aggregators.cryptocompare import CryptoComparePriceProvider
from feescope.providers.base import ProviderStatus
from feescope.providers.cex.binance import BinanceSpotProvider
from feescope.providers.cex.coinbase import CoinbaseSpotProvider
from feescope.providers.cex.kraken import KrakenSpotProvider
from feescope.providers.cex.kucoin import KucoinSpotProvider
from feescope.providers.cex.okx import OkxSpotProvider
from feescope.providers.defaults import DEFAULT_PRICE_PRIORITY, create_default_registry, create_price_gatherer
from feescope.providers.gas import EvmGasProvider
from feescope.providers.registry import ProviderRegistry
from tests.fakes import FakeSpotProvider


def _ok(payload, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


class TestMockedSources:
    @patch("feescope.providers.http.requests.get")
    def test_coinbase(self, mock_get):
        mock_get.return_value = _ok({"data": {"amount": "50000.00", "currency": "USD"}})
        quote = CoinbaseSpotProvider().get_spot("BTC")

        assert quote.symbol == "BTC"
        assert quote.price_usd == 50000.0
        assert quote.provider_name == "coinbase"
        assert "BTC-USD" in mock_get.call_args[0][0]

    @patch("feescope.providers.http.requests.get")
    def test_kraken(self, mock_get):
        mock_get.return_value = _ok({"error": [], "result": {"XXBTZUSD": {"c": ["49999.50", "0.1"]}}})
        quote = KrakenSpotProvider().get_spot("BTC")

        assert quote.price_usd == 49999.50
        assert mock_get.call_args.kwargs["params"] == {"pair": "XBTUSD"}

    @patch("feescope.providers.http.requests.get")
    def test_kraken_error_payload(self, mock_get):
        mock_get.return_value = _ok({"error": ["EQuery:Unknown asset pair"], "result": {}})
        with pytest.raises(ProviderUnavailable, match="Unknown asset pair"):
            KrakenSpotProvider().get_spot("XRP")

    @patch("feescope.providers.http.requests.get")
    def test_binance(self, mock_get):
        mock_get.return_value = _ok({"symbol": "ETHUSDT", "price": "2001.25"})
        quote = BinanceSpotProvider().get_spot("eth")

        assert quote.symbol == "ETH"
        assert quote.price_usd == 2001.25
        assert mock_get.call_args.kwargs["params"] == {"symbol": "ETHUSDT"}

    @patch("feescope.providers.http.requests.get")
    def test_kucoin(self, mock_get):
        mock_get.return_value = _ok({"code": "200000", "data": {"price": "150.5"}})
        assert KucoinSpotProvider().get_spot("SOL").price_usd == 150.5

    @patch("feescope.providers.http.requests.get")
    def test_okx(self, mock_get):
        mock_get.return_value = _ok({"code": "0", "data": [{"instId": "XRP-USD-SWAP", "last": "0.52"}]})
        assert OkxSpotProvider().get_spot("XRP").price_usd == 0.52

    @patch("feescope.providers.http.requests.get")
    def test_okx_empty_rows(self, mock_get):
        mock_get.return_value = _ok({"code": "0", "data": []})
        with pytest.raises(ProviderUnavailable):
            OkxSpotProvider().get_spot("XRP")

    @patch("feescope.providers.http.requests.get")
    def test_coingecko(self, mock_get):
        mock_get.return_value = _ok({"matic-network": {"usd": 0.71}})
        quote = CoinGeckoPriceProvider().get_spot("MATIC")

        assert quote.price_usd == 0.71
        assert mock_get.call_args.kwargs["params"]["ids"] == "matic-network"

    def test_coingecko_unmapped_symbol(self):
        with pytest.raises(ProviderUnavailable, match="no CoinGecko id"):
            CoinGeckoPriceProvider().get_spot("DOGE")

    @patch("feescope.providers.http.requests.get")
    def test_cryptocompare(self, mock_get):
        mock_get.return_value = _ok({"USD": 35.2})
        assert CryptoComparePriceProvider().get_spot("AVAX").price_usd == 35.2

    @patch("feescope.providers.http.requests.get")
    def test_cryptocompare_error_response(self, mock_get):
        mock_get.return_value = _ok({"Response": "Error", "Message": "market does not exist"})
        with pytest.raises(ProviderUnavailable, match="market does not exist"):
            CryptoComparePriceProvider().get_spot("XYZ")

    @patch("feescope.providers.http.requests.get")
    def test_zero_price_is_degraded(self, mock_get):
        mock_get.return_value = _ok({"price": "0"})
        quote = BinanceSpotProvider().get_spot("BTC")

        assert quote.status == ProviderStatus.DEGRADED
        assert not quote.is_valid()

    @patch("feescope.providers.http.requests.get")
    def test_rate_limited(self, mock_get):
        mock_get.return_value = _ok({}, status=429)
        with pytest.raises(ProviderUnavailable, match="429"):
            CoinbaseSpotProvider().get_spot("BTC")

    @patch("feescope.providers.http.requests.get")
    def test_non_json_body(self, mock_get):
        resp = _ok(None)
        resp.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = resp
        with pytest.raises(ProviderUnavailable, match="not JSON"):
            BinanceSpotProvider().get_spot("BTC")


class TestProviderRegistry:
    def test_register_and_build_sources(self):
        registry = ProviderRegistry()
        registry.register_price("coinbase", CoinbaseSpotProvider)
        registry.register_price("kraken", KrakenSpotProvider)

        sources = registry.build_price_sources(["kraken", "coinbase"])
        assert [s.provider_name for s in sources] == ["kraken", "coinbase"]
        assert registry.get_price("kraken") is sources[0]

    def test_unknown_names_skipped(self):
        registry = ProviderRegistry()
        registry.register_price("fake", FakeSpotProvider("fake"))
        sources = registry.build_price_sources(["nope", "fake"])
        assert [s.provider_name for s in sources] == ["fake"]

    def test_get_unknown_price_source(self):
        with pytest.raises(KeyError, match="Unknown price source"):
            ProviderRegistry().get_price("nope")

    def test_gas_strategy_selected_once_per_type(self):
        registry = ProviderRegistry()
        registry.register_gas(ChainType.EVM, EvmGasProvider)
        first = registry.gas_provider_for(ChainType.EVM)

        assert isinstance(first, EvmGasProvider)
        assert registry.gas_provider_for(ChainType.EVM) is first

    def test_missing_gas_strategy(self):
        with pytest.raises(UnsupportedChainType):
            ProviderRegistry().gas_provider_for(ChainType.LEDGER)

    def test_default_registry_is_complete(self):
        registry = create_default_registry()
        assert registry.price_names == DEFAULT_PRICE_PRIORITY
        assert set(registry.gas_types) == set(ChainType)

    def test_price_gatherer_from_priority(self):
        gatherer = create_price_gatherer(priority=["okx", "binance"])
        assert gatherer.provider_names == ["okx", "binance"]
