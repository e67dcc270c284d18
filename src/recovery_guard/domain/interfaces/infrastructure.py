"""Infrastructure-facing interfaces used by the rate limiting machinery."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WindowDecision:
    """Outcome of one atomic read-prune-write on a sliding window.

    Attributes:
        admitted: Whether a new timestamp was recorded.
        retry_after: Seconds until the oldest entry leaves the window; ``0.0``
            when admitted.
        window_size: Entries in the window after the operation.
    """

    admitted: bool
    retry_after: float
    window_size: int


class IWindowStore(ABC):
    """A shared, time-bounded store of request timestamps per key.

    Implementations must make `try_acquire` atomic per key (prune, count and
    conditional insert as one unit) and must never hold a lock while the
    caller sleeps. Races across keys or processes are tolerated.
    """

    @abstractmethod
    async def try_acquire(self, key: str, limit: int, window_seconds: float) -> WindowDecision:
        """Prunes entries older than ``window_seconds`` and records a new
        entry when fewer than ``limit`` remain."""
        raise NotImplementedError

    @abstractmethod
    async def count(self, key: str, window_seconds: float) -> int:
        """Returns the number of entries younger than ``window_seconds``."""
        raise NotImplementedError

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forgets every entry of ``key``."""
        raise NotImplementedError
