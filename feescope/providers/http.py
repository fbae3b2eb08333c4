"""
HTTP and JSON-RPC transport shared by every provider.

The blocking primitives (get_json, post_json, rpc_call) raise
ProviderUnavailable on any network error, non-2xx status, JSON-RPC error or
undecodable body. The async helpers (fetch_json, rpc) run them in worker
threads with the configured timeout and retry budget: one retry for GETs,
none for POSTs.
"""
from __future__ import annotations

from functools import partial
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import requests

from .. import config
from .._version import __version__
from ..core.errors import ProviderUnavailable
from .resilience import RetryConfig, resilient_call

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
USER_AGENT = f"feescope/{__version__}"


def provider_label(prefix: str, url: str) -> str:
    """'<prefix>:<hostname>' for a contacted URL; bare prefix when the URL has no host."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    return f"{prefix}:{host}" if host else prefix


def parse_hex_int(value: Any) -> Optional[int]:
    """Decode a JSON-RPC quantity ('0x...'); None for missing or malformed values."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 16)
    except (TypeError, ValueError):
        return None


def to_float(x: Any) -> Optional[float]:
    if x is None:
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _decode(url: str, resp: requests.Response) -> Any:
    if resp.status_code == 429:
        raise ProviderUnavailable(url, "rate limited (HTTP 429)")
    if resp.status_code >= 400:
        raise ProviderUnavailable(url, f"HTTP {resp.status_code}")
    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderUnavailable(url, "response body is not JSON") from exc


def get_json(
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Any:
    merged = {"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})}
    try:
        resp = requests.get(
            url, params=params, headers=merged, timeout=timeout or config.http_timeout_s()
        )
    except requests.RequestException as exc:
        raise ProviderUnavailable(url, f"{type(exc).__name__}: {exc}") from exc
    return _decode(url, resp)


def post_json(
    url: str,
    body: Dict[str, Any],
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Any:
    merged = {"User-Agent": USER_AGENT, **JSON_HEADERS, **(headers or {})}
    try:
        resp = requests.post(
            url, json=body, headers=merged, timeout=timeout or config.http_timeout_s()
        )
    except requests.RequestException as exc:
        raise ProviderUnavailable(url, f"{type(exc).__name__}: {exc}") from exc
    return _decode(url, resp)


def rpc_call(
    url: str,
    method: str,
    params: Optional[List[Any]] = None,
    *,
    request_id: int = 1,
    timeout: Optional[float] = None,
) -> Any:
    """JSON-RPC 2.0 call; returns ``result`` or raises ProviderUnavailable."""
    body = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or []}
    payload = post_json(url, body, timeout=timeout)
    if not isinstance(payload, dict):
        raise ProviderUnavailable(url, f"{method}: unexpected payload type {type(payload).__name__}")
    if payload.get("error"):
        raise ProviderUnavailable(url, f"{method}: {payload['error']}")
    if "result" not in payload:
        raise ProviderUnavailable(url, f"{method}: response missing result")
    return payload["result"]


def _retry(retries: Optional[int], default: Callable[[], int]) -> RetryConfig:
    return RetryConfig(max_retries=retries if retries is not None else default())


async def fetch_json(
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    retries: Optional[int] = None,
) -> Any:
    budget = timeout or config.http_timeout_s()
    return await resilient_call(
        partial(get_json, url, params=params, headers=headers, timeout=budget),
        timeout=budget,
        retry_config=_retry(retries, config.get_retries),
    )


async def rpc(
    url: str,
    method: str,
    params: Optional[List[Any]] = None,
    *,
    request_id: int = 1,
    timeout: Optional[float] = None,
    retries: Optional[int] = None,
) -> Any:
    budget = timeout or config.http_timeout_s()
    return await resilient_call(
        partial(rpc_call, url, method, params, request_id=request_id, timeout=budget),
        timeout=budget,
        retry_config=_retry(retries, config.post_retries),
    )


async def post(
    url: str,
    body: Dict[str, Any],
    *,
    timeout: Optional[float] = None,
    retries: Optional[int] = None,
) -> Any:
    """Plain JSON POST (non JSON-RPC 2.0 dialects such as rippled)."""
    budget = timeout or config.http_timeout_s()
    return await resilient_call(
        partial(post_json, url, body, timeout=budget),
        timeout=budget,
        retry_config=_retry(retries, config.post_retries),
    )
