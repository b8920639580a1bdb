"""
Async Utilities for Fan-out Calls.

Python 3.12+ features used:
- asyncio.TaskGroup for structured concurrency (3.11+)
- Type parameter syntax for generic functions

Provides:
- Parallel execution that collects each outcome independently
- Circuit breaker for fault tolerance
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import RateLimitError

if TYPE_CHECKING:
    from collections.abc import Awaitable

logger = logging.getLogger(__name__)


# =============================================================================
# Parallel Execution with TaskGroup (Python 3.11+)
# =============================================================================


async def gather_with_errors[T](
    *coros: Awaitable[T],
    return_exceptions: bool = False,
    max_concurrency: int | None = None,
) -> list[T | Exception]:
    """
    Execute coroutines in parallel using TaskGroup.

    Results are returned in argument order regardless of completion order.
    Cancelling the caller cancels every pending coroutine; ``CancelledError``
    is never converted into a result.

    Args:
        *coros: Coroutines to execute
        return_exceptions: If True, an ``Exception`` raised by one coroutine
            becomes its result instead of cancelling the siblings
        max_concurrency: Optional cap on simultaneously running coroutines

    Returns:
        List of results (or exceptions if return_exceptions=True)

    Example:
        results = await gather_with_errors(
            backend_a.search("quantum", 15),
            backend_b.search("quantum", 15),
            return_exceptions=True,
        )
    """
    results: list[T | Exception] = [None] * len(coros)  # type: ignore[list-item]
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def run(coro: Awaitable[T], index: int) -> None:
        if semaphore is None:
            results[index] = await _settle(coro, return_exceptions)
            return
        async with semaphore:
            results[index] = await _settle(coro, return_exceptions)

    async with asyncio.TaskGroup() as tg:
        for i, coro in enumerate(coros):
            tg.create_task(run(coro, i))

    return results


async def _settle[T](coro: Awaitable[T], return_exceptions: bool) -> T | Exception:
    if not return_exceptions:
        return await coro
    try:
        return await coro
    except Exception as e:
        return e


# =============================================================================
# Circuit Breaker Pattern
# =============================================================================


@dataclass
class CircuitBreaker:
    """
    Circuit breaker for fault tolerance.

    States:
    - CLOSED: Normal operation
    - OPEN: Failing, reject requests immediately
    - HALF_OPEN: Testing if service recovered

    Example:
        breaker = CircuitBreaker(failure_threshold=5)

        async with breaker:
            result = await risky_api_call()
    """

    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    half_open_max_calls: int = 3

    _failure_count: int = field(init=False, default=0)
    _last_failure_time: float | None = field(init=False, default=None)
    _state: str = field(init=False, default="closed")
    _half_open_calls: int = field(init=False, default=0)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if circuit is open (rejecting requests)."""
        if self._state == "open":
            if self._last_failure_time:
                if time.monotonic() - self._last_failure_time > self.recovery_timeout:
                    return False  # Move to half-open
            return True
        return False

    async def __aenter__(self) -> CircuitBreaker:
        async with self._lock:
            if self.is_open:
                raise RateLimitError("Circuit breaker is open", retry_after=self.recovery_timeout)

            if self._state == "open":
                self._state = "half_open"
                self._half_open_calls = 0

            if self._state == "half_open":
                if self._half_open_calls >= self.half_open_max_calls:
                    raise RateLimitError(
                        "Circuit breaker is half-open (max calls reached)",
                        retry_after=self.recovery_timeout / 2,
                    )
                self._half_open_calls += 1

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        async with self._lock:
            if exc_val is not None and not isinstance(exc_val, asyncio.CancelledError):
                self._failure_count += 1
                self._last_failure_time = time.monotonic()

                if self._failure_count >= self.failure_threshold:
                    self._state = "open"
                    logger.warning(f"Circuit breaker opened after {self._failure_count} failures")
            elif exc_val is None:
                if self._state == "half_open":
                    self._state = "closed"
                    self._failure_count = 0
                    logger.info("Circuit breaker closed (recovered)")
                elif self._state == "closed":
                    self._failure_count = max(0, self._failure_count - 1)
