"""
Resilience primitives: retry with exponential backoff, per-call timeouts,
and the two combinators every provider uses:

- race_or_fallback: ordered fallback list, first usable result wins.
- gather_results: independent sources queried concurrently, all usable
  results kept.

Blocking calls (requests) are pushed to worker threads; a call that
overruns its timeout is abandoned and counts as "no result". Inside a
``blocking_pool`` block the threads come from a bounded pool and a call's
timeout only starts once a worker is free to run it.
"""
from __future__ import annotations

import asyncio
import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Sequence, TypeVar

from ..core.errors import ProviderUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProviderFn = Callable[[], Awaitable[Optional[T]]]

DEFAULT_POOL_WORKERS = 32


@dataclass
class RetryConfig:
    """Configuration for retry with exponential backoff."""
    max_retries: int = 2
    base_delay_s: float = 0.25
    max_delay_s: float = 2.0
    backoff_factor: float = 2.0


NO_RETRY = RetryConfig(max_retries=1)


class BlockingPool:
    """
    Worker threads for blocking provider calls.

    A slot is held from submission until the thread actually returns, so a
    call abandoned on timeout keeps its slot and later calls wait for a free
    worker before their own timeout starts.
    """

    def __init__(self, max_workers: int = DEFAULT_POOL_WORKERS) -> None:
        self.max_workers = max(1, int(max_workers))
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="feescope-io"
        )
        self._slots = asyncio.Semaphore(self.max_workers)

    def _release(self, fut: "asyncio.Future[Any]") -> None:
        self._slots.release()
        # abandoned calls finish unobserved
        if not fut.cancelled():
            fut.exception()

    async def run(self, func: Callable[..., T], *args: Any, timeout: float, **kwargs: Any) -> T:
        await self._slots.acquire()
        loop = asyncio.get_running_loop()
        try:
            fut = loop.run_in_executor(self._executor, partial(func, *args, **kwargs))
        except BaseException:
            self._slots.release()
            raise
        fut.add_done_callback(self._release)
        return await asyncio.wait_for(asyncio.shield(fut), timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


_active_pool: contextvars.ContextVar[Optional[BlockingPool]] = contextvars.ContextVar(
    "feescope_blocking_pool", default=None
)


def active_pool() -> Optional[BlockingPool]:
    return _active_pool.get()


@contextmanager
def blocking_pool(max_workers: int = DEFAULT_POOL_WORKERS) -> Iterator[BlockingPool]:
    """Route every call_in_thread inside the block through one bounded pool, shut down on exit."""
    pool = BlockingPool(max_workers)
    token = _active_pool.set(pool)
    try:
        yield pool
    finally:
        _active_pool.reset(token)
        pool.shutdown()


async def call_in_thread(func: Callable[..., T], *args: Any, timeout: float, **kwargs: Any) -> T:
    """Run a blocking call off the event loop, bounded by ``timeout`` seconds of run time."""
    pool = _active_pool.get()
    if pool is not None:
        return await pool.run(func, *args, timeout=timeout, **kwargs)
    return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout)


async def resilient_call(
    func: Callable[..., T],
    *args: Any,
    timeout: float,
    retry_config: Optional[RetryConfig] = None,
    **kwargs: Any,
) -> T:
    """
    Execute a blocking provider call with per-attempt timeout and retry.

    Raises the last exception once the retry budget is exhausted; a timeout
    surfaces as ProviderUnavailable.
    """
    cfg = retry_config or RetryConfig()
    attempts = max(1, cfg.max_retries)

    last_err: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return await call_in_thread(func, *args, timeout=timeout, **kwargs)
        except asyncio.TimeoutError:
            name = getattr(func, "__name__", repr(func))
            last_err = ProviderUnavailable(name, f"timeout after {timeout:.1f}s")
        except Exception as exc:
            last_err = exc
        logger.debug(
            "Attempt %d/%d failed: %s: %s", attempt, attempts, type(last_err).__name__, last_err
        )
        if attempt < attempts:
            delay = min(
                cfg.base_delay_s * (cfg.backoff_factor ** (attempt - 1)),
                cfg.max_delay_s,
            )
            await asyncio.sleep(delay)

    raise last_err  # type: ignore[misc]


async def race_or_fallback(
    providers: Sequence[ProviderFn[T]],
    per_timeout: float,
    total_timeout: float,
) -> Optional[T]:
    """
    Try providers in order; return the first non-None result.

    Each attempt gets min(per_timeout, remaining total budget). Errors and
    timeouts move on to the next provider. Returns None when nothing usable
    came back within the total budget.
    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    for index, provider in enumerate(providers):
        remaining = total_timeout - (loop.time() - started)
        if remaining <= 0:
            logger.debug("Fallback budget exhausted after %d/%d providers", index, len(providers))
            break
        budget = min(per_timeout, remaining)
        try:
            result = await asyncio.wait_for(provider(), budget)
        except asyncio.TimeoutError:
            logger.debug("Provider #%d timed out after %.2fs", index, budget)
            continue
        except Exception as exc:
            logger.debug("Provider #%d failed: %s: %s", index, type(exc).__name__, exc)
            continue
        if result is not None:
            return result
    return None


async def gather_results(
    providers: Sequence[ProviderFn[T]],
    per_timeout: float,
) -> List[T]:
    """Run independent providers concurrently and keep every non-None result, in input order."""

    async def _guarded(index: int, provider: ProviderFn[T]) -> Optional[T]:
        try:
            return await asyncio.wait_for(provider(), per_timeout)
        except asyncio.TimeoutError:
            logger.debug("Source #%d timed out after %.2fs", index, per_timeout)
        except Exception as exc:
            logger.debug("Source #%d failed: %s: %s", index, type(exc).__name__, exc)
        return None

    results = await asyncio.gather(*(_guarded(i, p) for i, p in enumerate(providers)))
    return [r for r in results if r is not None]
