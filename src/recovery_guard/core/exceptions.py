from __future__ import annotations

"""Centralized, structured exception hierarchy for recovery_guard.

Every custom error carries a machine-readable ``code`` for programmatic
handling and a human-readable ``message`` for logging and user feedback.

Expected, user-correctable outcomes of the validation pipeline (an address
that is already taken, a disposable domain, ...) are *not* exceptions: the
pipeline returns them as ``Reject`` values. The exceptions below describe
infrastructure conditions:

- Rate limiting of the external verification API or of verification mails.
- Transient and permanent failures of the verification API.
- Missing configuration and storage failures.
"""

from typing import Final

__all__: Final = [
    "RecoveryGuardError",
    "ConfigurationError",
    "RateLimitError",
    "TooManyVerificationAttemptsError",
    "VerificationError",
    "TransientVerificationError",
    "PermanentVerificationError",
    "RetryBudgetExhaustedError",
    "UserStoreError",
]

TRY_AGAIN_LATER = "The email could not be verified. Please try again later."


class RecoveryGuardError(Exception):
    """Base exception class for all custom errors in recovery_guard.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(RecoveryGuardError):
    """Raised when a required configuration value is missing or invalid.

    This is never retried. It maps to a `503 Service Unavailable` because the
    feature cannot work until an operator fixes the deployment.
    """

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Operational errors (typically map to 429 Too Many Requests)
# ---------------------------------------------------------------------------


class RateLimitError(RecoveryGuardError):
    """Base class for rate limiting related errors.

    This exception and its subclasses map to a `429 Too Many Requests` HTTP
    status code.
    """

    def __init__(self, message: str | None = None, code: str = "rate_limit_exceeded"):
        if message is None:
            message = TRY_AGAIN_LATER
        super().__init__(message, code)


class TooManyVerificationAttemptsError(RateLimitError):
    """Raised when a user requested too many verification mails recently."""

    def __init__(
        self,
        message: str = "Too many verification attempts. Please try again later.",
        code: str = "too_many_verification_attempts",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Verification API errors (typically map to 503 Service Unavailable)
# ---------------------------------------------------------------------------


class VerificationError(RecoveryGuardError):
    """Base class for failures talking to the external verification API."""

    def __init__(self, message: str = TRY_AGAIN_LATER, code: str = "verification_error"):
        super().__init__(message, code)


class TransientVerificationError(VerificationError):
    """The API answered with a rate-limit signal (HTTP 429); worth retrying."""

    def __init__(
        self,
        message: str = "Verification API rate limited the request.",
        code: str = "verification_rate_limited",
        status_code: int = 429,
    ):
        self.status_code = status_code
        super().__init__(message, code)


class PermanentVerificationError(VerificationError):
    """The API call failed in a way retrying cannot fix.

    Covers non-429 error statuses, network errors, timeouts and response
    bodies that are not a JSON object.
    """

    def __init__(
        self,
        message: str = "Verification API call failed.",
        code: str = "verification_failed",
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, code)


class RetryBudgetExhaustedError(VerificationError):
    """Raised when every allowed attempt observed a transient failure."""

    def __init__(self, attempts: int, message: str = TRY_AGAIN_LATER, code: str = "retry_budget_exhausted"):
        self.attempts = attempts
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Persistence errors (typically map to 500 Server Error)
# ---------------------------------------------------------------------------


class UserStoreError(RecoveryGuardError):
    """Raised for low-level failures of the user attribute store."""

    def __init__(self, message: str, code: str = "user_store_error"):
        super().__init__(message, code)
