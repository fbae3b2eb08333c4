"""HTTP / JSON-RPC transport helpers with mocked requests."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from feescope.core.errors import ProviderUnavailable
from feescope.providers import http


def _resp(payload, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


def test_provider_label():
    assert http.provider_label("rpc", "https://rpc.ankr.com/eth") == "rpc:rpc.ankr.com"
    assert http.provider_label("fee", "https://s1.ripple.com:51234") == "fee:s1.ripple.com"
    assert http.provider_label("static", "") == "static"


def test_parse_hex_int():
    assert http.parse_hex_int("0x4a817c800") == 20_000_000_000
    assert http.parse_hex_int(7) == 7
    assert http.parse_hex_int("0xzz") is None
    assert http.parse_hex_int(None) is None


@patch("feescope.providers.http.requests.post")
def test_rpc_call_returns_result(mock_post):
    mock_post.return_value = _resp({"jsonrpc": "2.0", "id": 1, "result": "0x1"})
    assert http.rpc_call("https://rpc.example", "eth_gasPrice") == "0x1"

    body = mock_post.call_args.kwargs["json"]
    assert body == {"jsonrpc": "2.0", "id": 1, "method": "eth_gasPrice", "params": []}
    assert mock_post.call_args.kwargs["headers"]["User-Agent"].startswith("feescope/")


@patch("feescope.providers.http.requests.post")
def test_rpc_call_error_member(mock_post):
    mock_post.return_value = _resp({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "not found"}})
    with pytest.raises(ProviderUnavailable, match="eth_gasPrice"):
        http.rpc_call("https://rpc.example", "eth_gasPrice")


@patch("feescope.providers.http.requests.post")
def test_rpc_call_missing_result(mock_post):
    mock_post.return_value = _resp({"jsonrpc": "2.0", "id": 1})
    with pytest.raises(ProviderUnavailable, match="missing result"):
        http.rpc_call("https://rpc.example", "eth_gasPrice")


@patch("feescope.providers.http.requests.get")
def test_get_json_network_error(mock_get):
    mock_get.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ProviderUnavailable, match="ConnectionError"):
        http.get_json("https://api.example/x")


@patch("feescope.providers.http.requests.get")
def test_get_json_server_error(mock_get):
    mock_get.return_value = _resp({}, status=502)
    with pytest.raises(ProviderUnavailable, match="HTTP 502"):
        http.get_json("https://api.example/x")


@patch("feescope.providers.http.requests.get")
def test_fetch_json_retries_once(mock_get):
    mock_get.side_effect = [requests.Timeout("slow"), _resp({"ok": True})]
    assert asyncio.run(http.fetch_json("https://api.example/x", timeout=1.0, retries=2)) == {"ok": True}
    assert mock_get.call_count == 2


@patch("feescope.providers.http.requests.post")
def test_rpc_not_retried(mock_post):
    mock_post.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ProviderUnavailable):
        asyncio.run(http.rpc("https://rpc.example", "eth_gasPrice", timeout=1.0, retries=1))
    assert mock_post.call_count == 1
