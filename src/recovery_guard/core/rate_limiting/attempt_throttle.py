"""Per-user throttle for recovery email verification mails.

A coarser, user-facing guard that sits next to the pipeline: a user may
request at most ``limit`` verification mails in a trailing window (three per
hour by default). It reuses the sliding-window store with a per-user key.
"""

import structlog

from recovery_guard.core.exceptions import TooManyVerificationAttemptsError
from recovery_guard.domain.interfaces import IWindowStore

logger = structlog.get_logger(__name__)


class VerificationAttemptThrottle:
    """Counts verification mail requests per user and time window."""

    KEY_PREFIX = "verification-mail"

    def __init__(self, store: IWindowStore, limit: int = 3, window_seconds: float = 3600.0):
        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds

    def _key(self, user_id: str) -> str:
        return f"{self.KEY_PREFIX}:{user_id}"

    async def check(self, user_id: str) -> None:
        """Records an attempt for ``user_id``.

        Raises:
            TooManyVerificationAttemptsError: If the user already used up the
                allowed attempts in the current window. The rejected attempt
                is not recorded.
        """
        decision = await self._store.try_acquire(self._key(user_id), self._limit, self._window_seconds)
        if not decision.admitted:
            logger.info(
                "verification_mail_attempts_exceeded",
                user_id=user_id,
                limit=self._limit,
                retry_after=round(decision.retry_after, 1),
            )
            raise TooManyVerificationAttemptsError()

    async def remaining(self, user_id: str) -> int:
        used = await self._store.count(self._key(user_id), self._window_seconds)
        return max(0, self._limit - used)

    async def reset(self, user_id: str) -> None:
        await self._store.reset(self._key(user_id))
