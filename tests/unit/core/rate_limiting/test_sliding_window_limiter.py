from unittest.mock import AsyncMock

import pytest

from recovery_guard.core.rate_limiting import AdmissionResult, InMemoryWindowStore, SlidingWindowLimiter
from recovery_guard.domain.interfaces import IWindowStore, WindowDecision


@pytest.fixture
def limiter(fake_clock, recorded_sleep):
    return SlidingWindowLimiter(InMemoryWindowStore(clock=fake_clock), window_seconds=1.0, sleep=recorded_sleep)


def full_store(retry_after: float = 0.5) -> AsyncMock:
    store = AsyncMock(spec=IWindowStore)
    store.try_acquire.return_value = WindowDecision(admitted=False, retry_after=retry_after, window_size=2)
    return store


@pytest.mark.asyncio
async def test_admits_immediately_below_rate(limiter, recorded_sleep):
    assert await limiter.admit("email-check", 2) is AdmissionResult.ADMITTED
    assert await limiter.admit("email-check", 2) is AdmissionResult.ADMITTED
    assert recorded_sleep.calls == []


@pytest.mark.asyncio
async def test_third_request_waits_for_oldest_entry(limiter, fake_clock, recorded_sleep):
    t1 = fake_clock()
    await limiter.admit("email-check", 2)
    fake_clock.advance(0.03125)
    await limiter.admit("email-check", 2)
    fake_clock.advance(0.03125)
    t3 = fake_clock()

    result = await limiter.admit("email-check", 2)

    assert result is AdmissionResult.ADMITTED
    assert len(recorded_sleep.calls) == 1
    assert recorded_sleep.calls[0] > 0
    assert recorded_sleep.calls[0] == pytest.approx(1.0 - (t3 - t1))
    assert fake_clock() - t3 == pytest.approx(1.0 - (t3 - t1))

    # After waiting out the window the next request goes straight through.
    fake_clock.advance(1.0)
    assert await limiter.admit("email-check", 2) is AdmissionResult.ADMITTED
    assert len(recorded_sleep.calls) == 1


@pytest.mark.asyncio
async def test_exceeded_after_max_wait_attempts():
    store = full_store()
    sleep = AsyncMock()
    limiter = SlidingWindowLimiter(store, sleep=sleep)

    result = await limiter.admit("email-check", 2, max_wait_attempts=3)

    assert result is AdmissionResult.EXCEEDED
    assert sleep.await_count == 3
    assert store.try_acquire.await_count == 4


@pytest.mark.asyncio
async def test_zero_wait_attempts_fails_fast():
    store = full_store()
    sleep = AsyncMock()
    limiter = SlidingWindowLimiter(store, sleep=sleep)

    assert await limiter.admit("k", 1, max_wait_attempts=0) is AdmissionResult.EXCEEDED
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_wait_is_bounded_by_window():
    store = full_store(retry_after=5.0)
    sleep = AsyncMock()
    limiter = SlidingWindowLimiter(store, window_seconds=1.0, sleep=sleep)

    await limiter.admit("k", 1, max_wait_attempts=1)

    sleep.assert_awaited_once_with(1.0)


@pytest.mark.asyncio
async def test_keys_do_not_share_windows(limiter, recorded_sleep):
    await limiter.admit("domain-check", 1)
    assert await limiter.admit("email-check", 1) is AdmissionResult.ADMITTED
    assert recorded_sleep.calls == []
