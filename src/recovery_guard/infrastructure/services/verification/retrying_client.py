"""Verification API client with exponential backoff on rate-limit responses.

Every logical verification (one email or one domain) goes through
`RetryingVerificationClient.call_with_retry`:

- A `TransientVerificationError` (HTTP 429) is retried after ``interval``
  seconds, and the interval doubles after each retry (1s, 2s, 4s, ...).
- After ``max_retries`` attempts that all failed transiently, the call fails
  with `RetryBudgetExhaustedError`.
- Any other exception propagates on its first occurrence, without backoff.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from recovery_guard.core.exceptions import RetryBudgetExhaustedError, TransientVerificationError
from recovery_guard.domain.interfaces import IVerificationApi
from recovery_guard.domain.value_objects import (
    VerificationResult,
    VerificationVerdict,
    mask_email,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 10
DEFAULT_INITIAL_INTERVAL_MS = 1000


def domain_verdict(data: Dict[str, Any]) -> VerificationVerdict:
    """Maps a domain endpoint response to a verdict."""
    if data.get("disposable", False):
        return VerificationVerdict.DISPOSABLE
    if not data.get("mx", False):
        return VerificationVerdict.NO_MAIL_EXCHANGER
    return VerificationVerdict.ALLOWED


def email_verdict(data: Dict[str, Any]) -> VerificationVerdict:
    """Maps an email endpoint response to a verdict.

    Only an explicit ``deliverable_email: false`` counts as undeliverable.
    """
    if data.get("disposable", False):
        return VerificationVerdict.DISPOSABLE
    if data.get("deliverable_email", True) is False:
        return VerificationVerdict.UNDELIVERABLE
    return VerificationVerdict.ALLOWED


def _related_domains(data: Dict[str, Any]) -> tuple[str, ...]:
    related = data.get("related_domains") or []
    if not isinstance(related, list):
        return ()
    return tuple(str(domain).strip().lower() for domain in related if isinstance(domain, str) and domain.strip())


class RetryingVerificationClient:
    """Issues domain and email checks against an `IVerificationApi`.

    Args:
        api: The wire adapter.
        max_retries: Total attempts allowed per logical call.
        initial_interval_ms: Wait before the first retry; doubled afterwards.
        sleep: Awaitable used for backoff; injectable for tests.
    """

    def __init__(
        self,
        api: IVerificationApi,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_interval_ms: int = DEFAULT_INITIAL_INTERVAL_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api = api
        self._max_retries = max_retries
        self._initial_interval_ms = initial_interval_ms
        self._sleep = sleep

    @staticmethod
    def _log_backoff(retry_state: RetryCallState) -> None:
        logger.warning(
            "verification_api_rate_limited_retrying",
            attempt=retry_state.attempt_number,
            wait_ms=int(retry_state.upcoming_sleep * 1000),
        )

    async def call_with_retry(
        self,
        action: Callable[..., Awaitable[T]],
        *args: Any,
        max_retries: Optional[int] = None,
        initial_interval_ms: Optional[int] = None,
    ) -> T:
        """Runs ``action`` until it succeeds, fails permanently or the budget runs out.

        Args:
            action: Coroutine function performing one attempt.
            *args: Positional arguments passed to ``action`` on every attempt.
            max_retries: Overrides the client's attempt budget.
            initial_interval_ms: Overrides the client's first backoff interval.

        Returns:
            Whatever ``action`` returned on its first successful attempt.

        Raises:
            RetryBudgetExhaustedError: Every attempt raised
                `TransientVerificationError`.
            Exception: Any other exception raised by ``action``, unchanged.
        """
        attempts = max_retries if max_retries is not None else self._max_retries
        interval_ms = initial_interval_ms if initial_interval_ms is not None else self._initial_interval_ms

        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=interval_ms / 1000, exp_base=2),
            retry=retry_if_exception_type(TransientVerificationError),
            before_sleep=self._log_backoff,
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await action(*args)
        except RetryError as exc:
            attempt_number = exc.last_attempt.attempt_number
            logger.warning("verification_retry_budget_exhausted", attempts=attempt_number)
            raise RetryBudgetExhaustedError(attempts=attempt_number) from exc.last_attempt.exception()

    async def check_domain(self, domain: str) -> VerificationResult:
        """Checks a domain for disposability and mail exchangers."""
        data = await self.call_with_retry(self._api.lookup, domain)
        verdict = domain_verdict(data)
        logger.info("verification_domain_checked", domain=domain, verdict=verdict.value)
        return VerificationResult(target=domain, verdict=verdict, related_domains=_related_domains(data))

    async def check_email(self, email: str) -> VerificationResult:
        """Checks a full address for disposability and deliverability."""
        data = await self.call_with_retry(self._api.lookup, email)
        verdict = email_verdict(data)
        logger.info("verification_email_checked", email=mask_email(email), verdict=verdict.value)
        return VerificationResult(target=email, verdict=verdict)
