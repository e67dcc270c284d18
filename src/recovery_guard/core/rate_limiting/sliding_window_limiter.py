"""Sliding-window admission control for calls to the verification API.

`SlidingWindowLimiter.admit` keeps at most ``rate_limit`` admissions per key
in any trailing window (one second by default). A caller that finds the
window full waits until the oldest entry leaves it and tries again, a bounded
number of times, instead of failing on the first collision. The limiter never
holds a lock while waiting; the per-key atomicity lives in the window store.

The check-then-record across processes is best-effort: a few requests more
than the configured rate may reach the API under extreme concurrency.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable

import structlog

from recovery_guard.domain.interfaces import IWindowStore

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_MAX_WAIT_ATTEMPTS = 10


class AdmissionResult(str, Enum):
    ADMITTED = "admitted"
    EXCEEDED = "exceeded"


class SlidingWindowLimiter:
    """Admits or delays callers so each key stays under its rate.

    Args:
        store: Shared window store (in-memory or Redis).
        window_seconds: Length of the trailing window.
        sleep: Awaitable used for waiting; injectable for tests.
    """

    def __init__(self, store: IWindowStore, window_seconds: float = 1.0, sleep: Sleep = asyncio.sleep):
        self._store = store
        self._window_seconds = window_seconds
        self._sleep = sleep

    async def admit(
        self,
        key: str,
        rate_limit: int,
        max_wait_attempts: int = DEFAULT_MAX_WAIT_ATTEMPTS,
    ) -> AdmissionResult:
        """Records an admission for ``key`` or reports that the window stayed full.

        Args:
            key: Limiter bucket, e.g. ``"email-check"``.
            rate_limit: Maximum admissions per window.
            max_wait_attempts: How many times to wait for a free slot before
                giving up.

        Returns:
            ``ADMITTED`` once a slot was recorded, ``EXCEEDED`` when the window
            was still full after ``max_wait_attempts`` waits. Callers must
            treat ``EXCEEDED`` as a hard stop.
        """
        waits = 0
        total_wait = 0.0
        while True:
            decision = await self._store.try_acquire(key, rate_limit, self._window_seconds)
            if decision.admitted:
                if waits:
                    logger.debug(
                        "rate_limit_admitted_after_wait",
                        key=key,
                        waits=waits,
                        waited_seconds=round(total_wait, 3),
                    )
                return AdmissionResult.ADMITTED

            if waits >= max_wait_attempts:
                logger.warning(
                    "rate_limit_exceeded",
                    key=key,
                    rate_limit=rate_limit,
                    attempts=waits,
                    window_size=decision.window_size,
                )
                return AdmissionResult.EXCEEDED

            delay = max(0.0, min(decision.retry_after, self._window_seconds))
            waits += 1
            total_wait += delay
            logger.debug(
                "rate_limit_waiting",
                key=key,
                attempt=waits,
                wait_seconds=round(delay, 3),
                window_size=decision.window_size,
            )
            await self._sleep(delay)
