# src/cache/single_flight.py — v1
"""Per-key single-flight coordination.

The first caller for a key runs the computation; callers arriving while it
is in flight await the same future and receive the same result or the same
exception. The in-flight marker is dropped once the computation settles, so
a later call (e.g. after a failure) starts a fresh computation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Deduplicate concurrent async computations by key."""

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Future[T]] = {}

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> tuple[T, bool]:
        """Run fn once per concurrent key.

        Returns:
            (result, shared) where shared is True when this caller joined a
            computation started by another caller.
        """
        existing = self._in_flight.get(key)
        if existing is not None:
            logger.debug("Joining in-flight computation")
            # shield: a cancelled waiter must not cancel the leader's work
            return await asyncio.shield(existing), True

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await fn()
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure does not warn at GC.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result, False
        finally:
            if not future.done():
                # Leader cancelled: waiters see CancelledError too.
                future.cancel()
            self._in_flight.pop(key, None)

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)
