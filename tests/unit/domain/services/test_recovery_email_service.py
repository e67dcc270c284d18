import pytest

from recovery_guard.core.exceptions import TooManyVerificationAttemptsError
from recovery_guard.core.rate_limiting import InMemoryWindowStore, VerificationAttemptThrottle
from recovery_guard.domain.services.recovery_email import (
    RECOVERY_APP_ID,
    RECOVERY_EMAIL_KEY,
    UNVERIFIED_RECOVERY_EMAIL_KEY,
    RecoveryEmailService,
)
from recovery_guard.domain.value_objects import UserContext


@pytest.fixture
def service(user_store, fake_clock):
    throttle = VerificationAttemptThrottle(InMemoryWindowStore(clock=fake_clock), limit=3, window_seconds=3600)
    return RecoveryEmailService(user_store, throttle)


def stored(user_store, user_id, key):
    return user_store.values.get((user_id, RECOVERY_APP_ID, key))


@pytest.mark.asyncio
async def test_missing_values_read_as_empty(service):
    assert await service.get_recovery_email("42") == ""
    assert await service.get_unverified_recovery_email("42") == ""


@pytest.mark.asyncio
async def test_build_user_context(service):
    await service.set_recovery_email("42", "verified@example.com")
    await service.set_unverified_recovery_email("42", "pending@example.com")

    context = await service.build_user_context("42", current_email="me@platform.example", locale="de")

    assert context == UserContext(
        user_id="42",
        current_email="me@platform.example",
        current_recovery_email="verified@example.com",
        current_unverified_recovery_email="pending@example.com",
        locale="de",
    )


@pytest.mark.asyncio
async def test_update_stores_pending_and_clears_verified(service, user_store):
    await service.set_recovery_email("42", "old@example.com")

    await service.update_recovery_email("42", "new@example.com")

    assert stored(user_store, "42", UNVERIFIED_RECOVERY_EMAIL_KEY) == "new@example.com"
    assert stored(user_store, "42", RECOVERY_EMAIL_KEY) == ""


@pytest.mark.asyncio
async def test_make_verified_promotes_pending_value(service, user_store):
    await service.update_recovery_email("42", "new@example.com")

    assert await service.make_recovery_email_verified("42") is True

    assert await service.get_recovery_email("42") == "new@example.com"
    assert stored(user_store, "42", UNVERIFIED_RECOVERY_EMAIL_KEY) is None


@pytest.mark.asyncio
async def test_make_verified_without_pending_value_is_a_no_op(service):
    await service.set_recovery_email("42", "kept@example.com")

    assert await service.make_recovery_email_verified("42") is False
    assert await service.get_recovery_email("42") == "kept@example.com"


@pytest.mark.asyncio
async def test_clear_recovery_email(service, user_store):
    await service.set_recovery_email("42", "verified@example.com")
    await service.set_unverified_recovery_email("42", "pending@example.com")

    await service.clear_recovery_email("42")

    assert await service.get_recovery_email("42") == ""
    assert await service.get_unverified_recovery_email("42") == ""


@pytest.mark.asyncio
async def test_limit_verification_email(service):
    for _ in range(3):
        await service.limit_verification_email("42")
    with pytest.raises(TooManyVerificationAttemptsError):
        await service.limit_verification_email("42")


@pytest.mark.asyncio
async def test_limit_is_disabled_without_throttle(user_store):
    service = RecoveryEmailService(user_store)
    for _ in range(10):
        await service.limit_verification_email("42")
