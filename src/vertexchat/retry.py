"""Minimal bounded retry for model calls.

Design goals:
- Small API surface
- Explicit state (policy + attempt counters)
- The final failure propagates unchanged
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import time
from typing import TYPE_CHECKING, TypeVar

import httpx

from vertexchat.errors import _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter.

    ``max_attempts`` counts every call, including the first one.
    """

    max_attempts: int = 3
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = None
    #: Retry only failures classified as transient (see ``should_retry_generate``).
    only_transient: bool = False

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")

    def predicate(self) -> Callable[[BaseException], bool]:
        """Return the retry predicate selected by this policy."""
        return should_retry_generate if self.only_transient else retry_any


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        # google-genai errors carry the HTTP status as ``code``.
        for attr in ("code", "status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def _is_transient_network_error(exc: BaseException) -> bool:
    for e in _walk_exception_chain(exc):
        if isinstance(e, (TimeoutError, asyncio.TimeoutError)):
            return True
        # RequestError is a stable base class for transport-level failures.
        if isinstance(e, (httpx.TimeoutException, httpx.RequestError)):
            return True
    return False


def retry_any(exc: BaseException) -> bool:
    """Retry every failure except cancellation."""
    return not isinstance(exc, asyncio.CancelledError)


def should_retry_generate(exc: BaseException) -> bool:
    """Return True when a *generate* exception looks transient.

    Contract:
    - Cancellation is never retried.
    - Errors carrying a known retryable HTTP status code are retried.
    - Timeouts and transport-level ``httpx`` errors are retried.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False

    status_code = extract_status_code(exc)
    if status_code is not None:
        return status_code in RETRYABLE_STATUS_CODES

    return _is_transient_network_error(exc)


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base] to avoid thundering herd.
    return random.random() * base  # noqa: S311


def _next_delay(
    policy: RetryPolicy, *, attempt: int, start: float
) -> float | None:
    """Return the sleep before the next attempt, or None when out of budget."""
    delay = _compute_backoff_delay(policy, retry_index=attempt)
    if policy.max_elapsed_s is not None:
        remaining = policy.max_elapsed_s - (time.monotonic() - start)
        if remaining <= 0:
            return None
        delay = min(delay, remaining)
    return delay


def retry_call(
    fn: Callable[[], T],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = retry_any,
) -> T:
    """Run a blocking callable with bounded retries."""
    start = time.monotonic()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return fn()
        except Exception as exc:
            if not should_retry(exc) or attempt >= policy.max_attempts:
                raise

            delay = _next_delay(policy, attempt=attempt, start=start)
            if delay is None:
                raise

            logger.debug(
                "Attempt %d/%d failed (%s: %s); retrying in %.2fs",
                attempt,
                policy.max_attempts,
                type(exc).__name__,
                exc,
                delay,
            )
            if delay > 0:
                time.sleep(delay)

    raise RuntimeError("retry_call exhausted without an exception")  # pragma: no cover


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = retry_any,
) -> T:
    """Run an async factory with bounded retries."""
    start = time.monotonic()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await factory()
        except Exception as exc:
            if not should_retry(exc) or attempt >= policy.max_attempts:
                raise

            delay = _next_delay(policy, attempt=attempt, start=start)
            if delay is None:
                raise

            logger.debug(
                "Attempt %d/%d failed (%s: %s); retrying in %.2fs",
                attempt,
                policy.max_attempts,
                type(exc).__name__,
                exc,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)

    raise RuntimeError("retry_async exhausted without an exception")  # pragma: no cover
