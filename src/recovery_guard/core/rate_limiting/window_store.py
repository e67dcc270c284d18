"""Sliding-window timestamp stores.

Two implementations of `IWindowStore` are provided:

- `InMemoryWindowStore` keeps a deque of timestamps per key in the current
  process, guarded by a per-key ``asyncio.Lock`` and swept periodically.
- `RedisWindowStore` keeps a sorted set per key in Redis and performs the
  prune-count-insert sequence in a single Lua script, so every worker sharing
  the Redis instance shares the window.

Both prune entries whose age is at least the window length, so an entry
recorded at ``t`` stops counting at exactly ``t + window``.
"""

from __future__ import annotations

import asyncio
import math
import time
import uuid
from collections import deque
from typing import Callable, Deque, Dict

import structlog
from redis.asyncio import Redis
from redis.exceptions import NoScriptError

from recovery_guard.domain.interfaces import IWindowStore, WindowDecision

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


class InMemoryWindowStore(IWindowStore):
    """Process-local sliding windows.

    Suitable for a single worker and for tests (inject ``clock``). Windows of
    keys that saw no traffic for a full window length are dropped by a sweep
    that runs at most once per ``sweep_interval`` seconds.
    """

    def __init__(self, clock: Clock = time.monotonic, sweep_interval: float = 60.0):
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._windows: Dict[str, Deque[float]] = {}
        self._horizons: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._last_sweep = clock()

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @staticmethod
    def _prune(window: Deque[float], now: float, window_seconds: float) -> None:
        while window and now - window[0] >= window_seconds:
            window.popleft()

    async def try_acquire(self, key: str, limit: int, window_seconds: float) -> WindowDecision:
        async with self._lock_for(key):
            now = self._clock()
            window = self._windows.setdefault(key, deque())
            self._horizons[key] = window_seconds
            self._prune(window, now, window_seconds)

            if len(window) < limit:
                window.append(now)
                decision = WindowDecision(admitted=True, retry_after=0.0, window_size=len(window))
            else:
                retry_after = max(0.0, window[0] + window_seconds - now)
                decision = WindowDecision(admitted=False, retry_after=retry_after, window_size=len(window))

        self._maybe_sweep(now)
        return decision

    async def count(self, key: str, window_seconds: float) -> int:
        async with self._lock_for(key):
            window = self._windows.get(key)
            if not window:
                return 0
            self._prune(window, self._clock(), window_seconds)
            return len(window)

    async def reset(self, key: str) -> None:
        async with self._lock_for(key):
            self._windows.pop(key, None)
            self._horizons.pop(key, None)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        self.sweep(now)

    def sweep(self, now: float | None = None) -> int:
        """Drops idle windows and returns how many keys were removed."""
        now = self._clock() if now is None else now
        removed = 0
        for key in list(self._windows):
            lock = self._locks.get(key)
            if lock is not None and lock.locked():
                continue
            window = self._windows[key]
            horizon = self._horizons.get(key, 0.0)
            if not window or now - window[-1] >= horizon:
                del self._windows[key]
                self._horizons.pop(key, None)
                self._locks.pop(key, None)
                removed += 1
        if removed:
            logger.debug("rate_limit_windows_swept", removed=removed, remaining=len(self._windows))
        return removed


class RedisWindowStore(IWindowStore):
    """Sliding windows shared through Redis sorted sets.

    Scores are wall-clock timestamps (``time.time``) so that every process
    agrees on the window. Each key expires shortly after its newest entry
    leaves the window.
    """

    _acquire_script = """
    local key = KEYS[1]
    local now = tonumber(ARGV[1])
    local window = tonumber(ARGV[2])
    local limit = tonumber(ARGV[3])
    local member = ARGV[4]
    local ttl_ms = tonumber(ARGV[5])
    redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
    local size = redis.call('ZCARD', key)
    if size < limit then
        redis.call('ZADD', key, now, member)
        redis.call('PEXPIRE', key, ttl_ms)
        return {1, '0', size + 1}
    end
    local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
    local retry_after = tonumber(oldest[2]) + window - now
    if retry_after < 0 then
        retry_after = 0
    end
    return {0, tostring(retry_after), size}
    """

    def __init__(
        self,
        redis_client: Redis,
        key_prefix: str = "recovery_guard:rate_limit",
        clock: Clock = time.time,
    ):
        self.redis = redis_client
        self._key_prefix = key_prefix
        self._clock = clock
        self._acquire_sha: str | None = None

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    async def _register_scripts(self) -> str:
        """Register the Lua script with Redis for atomic window updates."""
        if self._acquire_sha is None:
            self._acquire_sha = await self.redis.script_load(self._acquire_script)
        return self._acquire_sha

    async def try_acquire(self, key: str, limit: int, window_seconds: float) -> WindowDecision:
        now = self._clock()
        member = f"{now:.6f}:{uuid.uuid4().hex}"
        ttl_ms = int(math.ceil(window_seconds * 1000)) + 1000
        args = (self._key(key), now, window_seconds, limit, member, ttl_ms)

        sha = await self._register_scripts()
        try:
            admitted, retry_after, size = await self.redis.evalsha(sha, 1, *args)
        except NoScriptError:
            # Script cache was flushed (e.g. Redis restart); load it again once.
            self._acquire_sha = None
            sha = await self._register_scripts()
            admitted, retry_after, size = await self.redis.evalsha(sha, 1, *args)

        return WindowDecision(
            admitted=int(admitted) == 1,
            retry_after=max(0.0, float(retry_after)),
            window_size=int(size),
        )

    async def count(self, key: str, window_seconds: float) -> int:
        redis_key = self._key(key)
        now = self._clock()
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.zremrangebyscore(redis_key, "-inf", now - window_seconds)
            await pipe.zcard(redis_key)
            _, size = await pipe.execute()
        return int(size)

    async def reset(self, key: str) -> None:
        await self.redis.delete(self._key(key))
