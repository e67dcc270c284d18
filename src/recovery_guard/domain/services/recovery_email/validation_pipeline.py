"""Validation pipeline for candidate recovery emails.

Steps, each short-circuiting the rest:

1. Empty candidate: ``Ok`` (clearing the recovery email is always allowed).
2. Local rules (`RecoveryEmailRuleEngine`).
3. Popular-domain lookup.
4. Unfamiliar domains only: admit on the domain-check limiter, then check the
   domain for disposability and mail exchangers.
5. Every candidate: admit on the email-check limiter, then check the address
   for disposability and deliverability.

Popular domains skip step 4 but never step 5. Disposable and undeliverable
addresses share one rejection so verification internals are not exposed.

The pipeline returns a decision and never writes to user storage.
"""

from typing import Optional, Union

import structlog

from recovery_guard.core.exceptions import (
    ConfigurationError,
    PermanentVerificationError,
    RetryBudgetExhaustedError,
)
from recovery_guard.core.rate_limiting import AdmissionResult, SlidingWindowLimiter
from recovery_guard.domain.interfaces import IBlacklistOracle
from recovery_guard.domain.value_objects import (
    CandidateEmail,
    Error,
    FailureKind,
    Ok,
    Reject,
    RejectionReason,
    UserContext,
    ValidationOutcome,
    VerificationResult,
    VerificationVerdict,
)
from recovery_guard.infrastructure.services.verification import RetryingVerificationClient

from .rule_engine import RecoveryEmailRuleEngine

logger = structlog.get_logger(__name__)

DOMAIN_CHECK_KEY = "domain-check"
EMAIL_CHECK_KEY = "email-check"

_VERIFICATION_FAILURES = (PermanentVerificationError, RetryBudgetExhaustedError, ConfigurationError)


class RecoveryEmailValidationPipeline:
    """Orchestrates local rules, rate limiting and external verification.

    Args:
        rule_engine: Local checks.
        blacklist: Popular-domain lookup and disposable-domain enrichment.
        limiter: Sliding-window limiter shared by all pipeline instances.
        verification_client: Retrying client for the verification API.
        email_rate_limit: Email checks admitted per window.
        domain_rate_limit: Domain checks admitted per window.
        max_wait_attempts: Limiter wait budget per admission.
    """

    def __init__(
        self,
        rule_engine: RecoveryEmailRuleEngine,
        blacklist: IBlacklistOracle,
        limiter: SlidingWindowLimiter,
        verification_client: RetryingVerificationClient,
        email_rate_limit: int = 2,
        domain_rate_limit: int = 15,
        max_wait_attempts: int = 10,
    ):
        self._rule_engine = rule_engine
        self._blacklist = blacklist
        self._limiter = limiter
        self._client = verification_client
        self._email_rate_limit = email_rate_limit
        self._domain_rate_limit = domain_rate_limit
        self._max_wait_attempts = max_wait_attempts

    async def validate(self, candidate: Union[CandidateEmail, str], context: UserContext) -> ValidationOutcome:
        """Decides whether ``candidate`` may become the user's recovery email.

        Returns:
            ``Ok()``, ``Reject(reason)`` or ``Error(kind)``.
        """
        if not isinstance(candidate, CandidateEmail):
            candidate = CandidateEmail(candidate)
        if candidate.is_empty:
            return Ok()

        request_logger = logger.bind(user_id=context.user_id, email=candidate.mask_for_logging())

        local_outcome = await self._rule_engine.check_local_rules(candidate, context)
        if isinstance(local_outcome, Reject):
            return local_outcome

        if await self._blacklist.is_popular_domain(candidate.domain):
            request_logger.debug("recovery_email_popular_domain", domain=candidate.domain)
        else:
            outcome = await self._verify_domain(candidate, request_logger)
            if outcome is not None:
                return outcome

        outcome = await self._verify_email(candidate, request_logger)
        if outcome is not None:
            return outcome

        request_logger.info("recovery_email_validated")
        return Ok()

    async def _admit(self, key: str, rate_limit: int, request_logger) -> Optional[Error]:
        result = await self._limiter.admit(key, rate_limit, self._max_wait_attempts)
        if result is AdmissionResult.EXCEEDED:
            request_logger.warning("recovery_email_verification_rate_limited", key=key, rate_limit=rate_limit)
            return Error(FailureKind.RATE_LIMITED)
        return None

    async def _verify_domain(self, candidate: CandidateEmail, request_logger) -> Optional[ValidationOutcome]:
        error = await self._admit(DOMAIN_CHECK_KEY, self._domain_rate_limit, request_logger)
        if error is not None:
            return error

        result = await self._call(self._client.check_domain, candidate.domain, request_logger)
        if isinstance(result, Error):
            return result

        if result.verdict in (VerificationVerdict.DISPOSABLE, VerificationVerdict.NO_MAIL_EXCHANGER):
            await self._blacklist.add_disposable_domain(candidate.domain, result.related_domains)
            request_logger.info(
                "recovery_email_rejected",
                reason=RejectionReason.BLACKLISTED_EMAIL.value,
                verdict=result.verdict.value,
                domain=candidate.domain,
            )
            return Reject(RejectionReason.BLACKLISTED_EMAIL)
        return None

    async def _verify_email(self, candidate: CandidateEmail, request_logger) -> Optional[ValidationOutcome]:
        error = await self._admit(EMAIL_CHECK_KEY, self._email_rate_limit, request_logger)
        if error is not None:
            return error

        result = await self._call(self._client.check_email, candidate.value, request_logger)
        if isinstance(result, Error):
            return result

        if result.verdict in (VerificationVerdict.DISPOSABLE, VerificationVerdict.UNDELIVERABLE):
            request_logger.info(
                "recovery_email_rejected",
                reason=RejectionReason.BLACKLISTED_EMAIL.value,
                verdict=result.verdict.value,
            )
            return Reject(RejectionReason.BLACKLISTED_EMAIL)
        return None

    @staticmethod
    async def _call(check, target: str, request_logger) -> Union[VerificationResult, Error]:
        try:
            return await check(target)
        except _VERIFICATION_FAILURES as exc:
            request_logger.error(
                "recovery_email_verification_unavailable",
                error=str(exc),
                error_code=exc.code,
                attempts=getattr(exc, "attempts", None),
            )
            return Error(FailureKind.VERIFICATION_UNAVAILABLE)
