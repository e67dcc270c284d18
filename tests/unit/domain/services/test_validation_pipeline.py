from typing import List
from unittest.mock import AsyncMock

import pytest

from recovery_guard.core.exceptions import (
    ConfigurationError,
    PermanentVerificationError,
    TransientVerificationError,
)
from recovery_guard.core.rate_limiting import InMemoryWindowStore, SlidingWindowLimiter
from recovery_guard.domain.services.recovery_email import (
    DOMAIN_CHECK_KEY,
    EMAIL_CHECK_KEY,
    RECOVERY_APP_ID,
    RECOVERY_EMAIL_KEY,
    RecoveryEmailRuleEngine,
    RecoveryEmailValidationPipeline,
)
from recovery_guard.domain.value_objects import (
    CandidateEmail,
    Error,
    FailureKind,
    Ok,
    Reject,
    RejectionReason,
    UserContext,
)
from recovery_guard.infrastructure.services.verification import RetryingVerificationClient


class SpyWindowStore(InMemoryWindowStore):
    def __init__(self, clock):
        super().__init__(clock=clock)
        self.acquired: List[str] = []

    async def try_acquire(self, key, limit, window_seconds):
        self.acquired.append(key)
        return await super().try_acquire(key, limit, window_seconds)


@pytest.fixture
def window_store(fake_clock):
    return SpyWindowStore(fake_clock)


@pytest.fixture
def make_pipeline(user_store, blacklist, window_store, recorded_sleep):
    def factory(api, email_rate_limit=2, domain_rate_limit=15, max_wait_attempts=10, max_retries=10):
        engine = RecoveryEmailRuleEngine(
            user_store, blacklist, reserved_domains=("legacy.example", "main.example"), alias_limit=5
        )
        limiter = SlidingWindowLimiter(window_store, window_seconds=1.0, sleep=recorded_sleep)
        client = RetryingVerificationClient(api, max_retries=max_retries, sleep=AsyncMock())
        return RecoveryEmailValidationPipeline(
            engine,
            blacklist,
            limiter,
            client,
            email_rate_limit=email_rate_limit,
            domain_rate_limit=domain_rate_limit,
            max_wait_attempts=max_wait_attempts,
        )

    return factory


@pytest.fixture
def context():
    return UserContext(user_id="u1", current_email="owner@platform.example")


@pytest.mark.asyncio
async def test_popular_domain_skips_domain_check(make_pipeline, verification_api, window_store, context):
    pipeline = make_pipeline(verification_api)

    outcome = await pipeline.validate("alice@knownprovider.com", context)

    assert outcome == Ok()
    assert window_store.acquired.count(DOMAIN_CHECK_KEY) == 0
    assert window_store.acquired.count(EMAIL_CHECK_KEY) == 1
    assert verification_api.calls == ["alice@knownprovider.com"]


@pytest.mark.asyncio
async def test_unfamiliar_domain_is_checked_before_email(make_pipeline, verification_api, window_store, context):
    pipeline = make_pipeline(verification_api)

    assert await pipeline.validate("carol@small-isp.example", context) == Ok()
    assert window_store.acquired == [DOMAIN_CHECK_KEY, EMAIL_CHECK_KEY]
    assert verification_api.calls == ["small-isp.example", "carol@small-isp.example"]


@pytest.mark.asyncio
async def test_disposable_domain_is_rejected_and_recorded(make_pipeline, make_verification_api, blacklist, context):
    api = make_verification_api(
        {"disposable-mail.test": {"disposable": True, "mx": True, "related_domains": ["dm2.test"]}}
    )
    pipeline = make_pipeline(api)

    outcome = await pipeline.validate("bob@disposable-mail.test", context)

    assert outcome == Reject(RejectionReason.BLACKLISTED_EMAIL)
    assert blacklist.added == [("disposable-mail.test", ("dm2.test",))]
    assert api.calls == ["disposable-mail.test"]


@pytest.mark.asyncio
async def test_domain_without_mail_exchanger_is_rejected(make_pipeline, make_verification_api, blacklist, context):
    api = make_verification_api({"nomx.example": {"disposable": False, "mx": False}})
    pipeline = make_pipeline(api)

    outcome = await pipeline.validate("dave@nomx.example", context)

    assert outcome == Reject(RejectionReason.BLACKLISTED_EMAIL)
    assert blacklist.added == [("nomx.example", ())]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        {"disposable": True, "deliverable_email": True},
        {"disposable": False, "deliverable_email": False},
    ],
)
async def test_disposable_or_undeliverable_email_is_rejected(
    make_pipeline, make_verification_api, blacklist, context, response
):
    api = make_verification_api({"bob@knownprovider.com": response})
    pipeline = make_pipeline(api)

    outcome = await pipeline.validate("bob@knownprovider.com", context)

    assert outcome == Reject(RejectionReason.BLACKLISTED_EMAIL)
    assert blacklist.added == []


@pytest.mark.asyncio
async def test_reserved_domain_is_rejected_without_api_call(make_pipeline, verification_api, window_store, context):
    pipeline = make_pipeline(verification_api)

    outcome = await pipeline.validate("x@legacy.example", context)

    assert outcome == Reject(RejectionReason.RESERVED_DOMAIN)
    assert verification_api.calls == []
    assert window_store.acquired == []


@pytest.mark.asyncio
async def test_self_match_is_rejected_without_api_call(make_pipeline, verification_api, context):
    pipeline = make_pipeline(verification_api)

    outcome = await pipeline.validate("owner@platform.example", context)

    assert outcome == Reject(RejectionReason.SAME_AS_ACCOUNT_EMAIL)
    assert verification_api.calls == []


@pytest.mark.asyncio
async def test_empty_candidate_is_always_ok(make_pipeline, make_verification_api, user_store, window_store):
    api = make_verification_api(default=PermanentVerificationError())
    pipeline = make_pipeline(api)
    context = UserContext(user_id="u1", current_email="", current_recovery_email="old@x.com")

    assert await pipeline.validate("", context) == Ok()
    assert api.calls == []
    assert window_store.acquired == []
    assert user_store.lookups == []


@pytest.mark.asyncio
async def test_rate_limited_when_window_stays_full(make_pipeline, verification_api, context):
    pipeline = make_pipeline(verification_api, email_rate_limit=1, max_wait_attempts=0)

    assert await pipeline.validate("alice@knownprovider.com", context) == Ok()
    outcome = await pipeline.validate("carol@knownprovider.com", context)

    assert outcome == Error(FailureKind.RATE_LIMITED)
    assert verification_api.calls == ["alice@knownprovider.com"]


@pytest.mark.asyncio
async def test_burst_waits_for_a_free_slot(make_pipeline, verification_api, recorded_sleep, context):
    pipeline = make_pipeline(verification_api, email_rate_limit=2)

    outcomes = [
        await pipeline.validate(f"user{i}@knownprovider.com", context) for i in range(3)
    ]

    assert outcomes == [Ok(), Ok(), Ok()]
    assert recorded_sleep.calls == [1.0]


@pytest.mark.asyncio
async def test_permanent_api_failure_is_unavailable(make_pipeline, make_verification_api, context):
    api = make_verification_api({"small-isp.example": PermanentVerificationError(status_code=500)})
    pipeline = make_pipeline(api)

    outcome = await pipeline.validate("carol@small-isp.example", context)

    assert outcome == Error(FailureKind.VERIFICATION_UNAVAILABLE)
    assert api.calls == ["small-isp.example"]


@pytest.mark.asyncio
async def test_retry_budget_exhaustion_is_unavailable(make_pipeline, make_verification_api, context):
    api = make_verification_api(default=TransientVerificationError())
    pipeline = make_pipeline(api, max_retries=3)

    outcome = await pipeline.validate("alice@knownprovider.com", context)

    assert outcome == Error(FailureKind.VERIFICATION_UNAVAILABLE)
    assert api.calls == ["alice@knownprovider.com"] * 3


@pytest.mark.asyncio
async def test_missing_configuration_is_unavailable(make_pipeline, make_verification_api, context):
    api = make_verification_api(default=ConfigurationError("VerifyMail API key is not configured."))
    pipeline = make_pipeline(api)

    outcome = await pipeline.validate("alice@knownprovider.com", context)

    assert outcome == Error(FailureKind.VERIFICATION_UNAVAILABLE)


@pytest.mark.asyncio
async def test_validation_never_writes_to_user_store(make_pipeline, verification_api, user_store, context):
    await user_store.set_attribute("someone", RECOVERY_APP_ID, RECOVERY_EMAIL_KEY, "x@y.example")
    before = dict(user_store.values)
    pipeline = make_pipeline(verification_api)

    await pipeline.validate("alice@knownprovider.com", context)

    assert user_store.values == before


@pytest.mark.asyncio
async def test_whitespace_only_candidate_is_invalid_format(make_pipeline, verification_api):
    pipeline = make_pipeline(verification_api)
    context = UserContext(user_id="u1", current_email="", current_recovery_email="old@x.com")

    assert await pipeline.validate("   ", context) == Reject(RejectionReason.INVALID_FORMAT)
    assert await pipeline.validate(CandidateEmail("\t"), context) == Reject(RejectionReason.INVALID_FORMAT)
    assert verification_api.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("padded", [" alice@knownprovider.com", "alice@knownprovider.com\t"])
async def test_padded_account_email_is_rejected(make_pipeline, verification_api, padded):
    pipeline = make_pipeline(verification_api)
    context = UserContext(user_id="u1", current_email="alice@knownprovider.com")

    assert await pipeline.validate(padded, context) == Reject(RejectionReason.INVALID_FORMAT)
    assert verification_api.calls == []
