"""Rate limiting for the verification API and for verification mails."""

from .attempt_throttle import VerificationAttemptThrottle
from .sliding_window_limiter import AdmissionResult, SlidingWindowLimiter
from .window_store import InMemoryWindowStore, RedisWindowStore

__all__ = [
    "AdmissionResult",
    "InMemoryWindowStore",
    "RedisWindowStore",
    "SlidingWindowLimiter",
    "VerificationAttemptThrottle",
]
