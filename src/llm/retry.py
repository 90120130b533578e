# src/llm/retry.py — v1
"""Bounded retry for LLM calls, driven by one error-classification function.

A failure is retryable only when it is a transport-level timeout AND the
upstream reported 500, 502, 503 or 504. Everything else (auth errors,
malformed requests, non-timeout network errors) is terminal.

The default policy makes 3 attempts in total with no delay and no jitter;
backoff is available through RetryPolicy without changing callers.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal

from policylens.core.errors import AnalysisFailure, AnalysisTimeout
from policylens.llm.base_client import LLMCallError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES: frozenset[int] = frozenset({500, 502, 503, 504})


@dataclass(frozen=True)
class ErrorClassification:
    """Retry verdict for a single failure."""

    kind: Literal["retryable", "terminal"]
    status_code: int | None = None
    timeout: bool = False

    @property
    def retryable(self) -> bool:
        return self.kind == "retryable"


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and backoff schedule."""

    max_attempts: int = 3
    base_delay_s: float = 0.0
    backoff_factor: float = 2.0
    jitter: bool = False

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry following a 0-based failed attempt."""
        delay = self.base_delay_s * (self.backoff_factor ** attempt)
        if self.jitter and delay > 0:
            delay *= 0.5 + random.random()  # noqa: S311
        return delay


DEFAULT_RETRY_POLICY = RetryPolicy()


def classify_error(error: BaseException) -> ErrorClassification:
    """Classify an exception into retryable or terminal."""
    if isinstance(error, LLMCallError):
        retryable = error.timeout and error.status_code in RETRYABLE_STATUSES
        return ErrorClassification(
            kind="retryable" if retryable else "terminal",
            status_code=error.status_code,
            timeout=error.timeout,
        )
    return ErrorClassification(kind="terminal")


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    policy: RetryPolicy | None = None,
    deadline: float | None = None,
    operation: str = "analysis",
    **kwargs: Any,
) -> Any:
    """Execute an async function with bounded, classification-aware retry.

    Args:
        fn: Coroutine function to call.
        policy: Attempt budget and backoff. Defaults to 3 attempts, no delay.
        deadline: Absolute event-loop time (loop.time()) after which no
            further attempt is started and the running one is cancelled.
        operation: Label used in log messages and errors.

    Raises:
        AnalysisTimeout: If the deadline expires.
        AnalysisFailure: On a terminal error or when attempts are exhausted.
    """
    policy = policy or DEFAULT_RETRY_POLICY
    loop = asyncio.get_running_loop()
    attempts = 0

    while True:
        if deadline is not None and loop.time() >= deadline:
            raise AnalysisTimeout(
                f"{operation} deadline expired after {attempts} attempts",
                attempts=attempts,
            )

        attempts += 1
        timeout_cm = asyncio.timeout_at(deadline)
        try:
            async with timeout_cm:
                return await fn(*args, **kwargs)
        except Exception as e:
            if timeout_cm.expired():
                raise AnalysisTimeout(
                    f"{operation} deadline expired during attempt {attempts}",
                    attempts=attempts,
                    last_error=e,
                ) from e

            verdict = classify_error(e)
            if not verdict.retryable:
                raise AnalysisFailure(
                    f"{operation} failed: {e}", attempts=attempts, last_error=e,
                ) from e
            if attempts >= policy.max_attempts:
                raise AnalysisFailure(
                    f"{operation} failed after {attempts} attempts: {e}",
                    attempts=attempts,
                    last_error=e,
                ) from e

            delay = policy.delay_for(attempts - 1)
            if deadline is not None and loop.time() + delay >= deadline:
                raise AnalysisTimeout(
                    f"{operation} deadline leaves no room for attempt {attempts + 1}",
                    attempts=attempts,
                    last_error=e,
                ) from e

            logger.warning(
                "%s: retryable failure (status=%s, attempt %d/%d), retrying in %.1fs",
                operation, verdict.status_code, attempts, policy.max_attempts, delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)
