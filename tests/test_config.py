"""Config layering: built-in defaults <- config.yaml <- FEESCOPE_* environment."""

from __future__ import annotations

import pytest

from feescope import config

_ENV_VARS = (
    "FEESCOPE_CONFIG",
    "FEESCOPE_HTTP_TIMEOUT_S",
    "FEESCOPE_CHAIN_TIMEOUT_S",
    "FEESCOPE_CHAINS",
    "FEESCOPE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def yaml_config(tmp_path, monkeypatch):
    def _write(text: str):
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        monkeypatch.setenv("FEESCOPE_CONFIG", str(path))
        return path

    return _write


def test_defaults_without_yaml(tmp_path, monkeypatch):
    monkeypatch.setenv("FEESCOPE_CONFIG", str(tmp_path / "missing.yaml"))
    assert config.http_timeout_s() == 6.0
    assert config.get_retries() == 2
    assert config.post_retries() == 1
    assert config.chain_timeout_s() == 20.0
    assert config.l1_chain_key() == "eth"
    assert config.freshness_hours() == 3.0
    assert config.enabled_chains() == []
    assert config.price_priority()[0] == "coingecko"
    assert config.log_level() == "INFO"


def test_yaml_overrides_defaults(yaml_config):
    yaml_config(
        "http:\n"
        "  timeout_s: 2.5\n"
        "snapshot:\n"
        "  l1_chain: base\n"
        "chains:\n"
        "  enabled: [btc, eth]\n"
        "  overrides:\n"
        "    eth:\n"
        "      max_usd: 80\n"
    )
    assert config.http_timeout_s() == 2.5
    assert config.get_retries() == 2
    assert config.l1_chain_key() == "base"
    assert config.enabled_chains() == ["btc", "eth"]
    assert config.chain_overrides() == {"eth": {"max_usd": 80}}


def test_env_overrides_yaml(yaml_config, monkeypatch):
    yaml_config("http:\n  timeout_s: 2.5\nlogging:\n  level: info\n")
    monkeypatch.setenv("FEESCOPE_HTTP_TIMEOUT_S", "9")
    monkeypatch.setenv("FEESCOPE_CHAIN_TIMEOUT_S", "4.5")
    monkeypatch.setenv("FEESCOPE_CHAINS", "sol, xrp,,")
    monkeypatch.setenv("FEESCOPE_LOG_LEVEL", "debug")

    assert config.http_timeout_s() == 9.0
    assert config.chain_timeout_s() == 4.5
    assert config.enabled_chains() == ["sol", "xrp"]
    assert config.log_level() == "DEBUG"


def test_non_mapping_yaml_ignored(yaml_config):
    yaml_config("- just\n- a list\n")
    assert config.http_timeout_s() == 6.0


def test_api_keys_only_from_environment(yaml_config, monkeypatch):
    yaml_config("ETHERSCAN_KEY: from-yaml\n")
    monkeypatch.delenv("ETHERSCAN_KEY", raising=False)
    assert config.api_key("ETHERSCAN_KEY") is None

    monkeypatch.setenv("ETHERSCAN_KEY", "  abc123 ")
    assert config.api_key("ETHERSCAN_KEY") == "abc123"
