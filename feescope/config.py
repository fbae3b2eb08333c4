"""
Load config from config.yaml with optional env overrides.
Single source of truth for HTTP timeouts, retry budgets, snapshot budgets,
enabled chains, per-chain overrides and price source priority.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

# Defaults if no YAML or env
_DEFAULTS: Dict[str, Any] = {
    "http": {
        "timeout_s": 6.0,
        "get_retries": 2,
        "post_retries": 1,
    },
    "snapshot": {
        "chain_timeout_s": 20.0,
        "l1_chain": "eth",
        "freshness_hours": 3,
        "price_retries": 1,
        "max_workers": 32,
    },
    "chains": {
        "enabled": [],
        "overrides": {},
    },
    "providers": {
        "price_priority": [
            "coingecko",
            "cryptocompare",
            "binance",
            "kucoin",
            "kraken",
            "coinbase",
            "okx",
        ],
    },
    "logging": {"level": "INFO"},
}


def _config_yaml_path() -> Path:
    """Config.yaml lives at repo root (parent of package dir); FEESCOPE_CONFIG overrides."""
    explicit = os.environ.get("FEESCOPE_CONFIG", "").strip()
    if explicit:
        return Path(explicit)
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml(path: Optional[Path] = None) -> dict:
    config_path = path or _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    timeout = os.environ.get("FEESCOPE_HTTP_TIMEOUT_S")
    if timeout:
        overrides.setdefault("http", {})["timeout_s"] = float(timeout)
    chain_timeout = os.environ.get("FEESCOPE_CHAIN_TIMEOUT_S")
    if chain_timeout:
        overrides.setdefault("snapshot", {})["chain_timeout_s"] = float(chain_timeout)
    enabled = os.environ.get("FEESCOPE_CHAINS")
    if enabled:
        overrides.setdefault("chains", {})["enabled"] = [
            k.strip() for k in enabled.split(",") if k.strip()
        ]
    level = os.environ.get("FEESCOPE_LOG_LEVEL")
    if level:
        overrides.setdefault("logging", {})["level"] = level
    return overrides


def get_config(path: Optional[Path] = None) -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml(path))
    merged = _deep_merge(merged, _env_overrides())
    return merged


# Convenience accessors
def http_timeout_s() -> float:
    return float(get_config()["http"]["timeout_s"])


def get_retries() -> int:
    return int(get_config()["http"]["get_retries"])


def post_retries() -> int:
    return int(get_config()["http"]["post_retries"])


def chain_timeout_s() -> float:
    return float(get_config()["snapshot"]["chain_timeout_s"])


def l1_chain_key() -> str:
    return str(get_config()["snapshot"]["l1_chain"])


def freshness_hours() -> float:
    return float(get_config()["snapshot"]["freshness_hours"])


def price_retries() -> int:
    return int(get_config()["snapshot"]["price_retries"])


def max_workers() -> int:
    return int(get_config()["snapshot"]["max_workers"])


def enabled_chains() -> List[str]:
    return list(get_config()["chains"]["enabled"] or [])


def chain_overrides() -> Dict[str, Dict[str, Any]]:
    return dict(get_config()["chains"]["overrides"] or {})


def price_priority() -> List[str]:
    return list(get_config()["providers"]["price_priority"])


def log_level() -> str:
    return str(get_config()["logging"]["level"]).upper()


def api_key(name: str) -> Optional[str]:
    """API keys come from the environment only, never from config.yaml."""
    value = os.environ.get(name, "").strip()
    return value or None
