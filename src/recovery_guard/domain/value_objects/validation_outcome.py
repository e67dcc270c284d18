"""Tagged result of validating a candidate recovery email.

`validate` returns exactly one of:

- ``Ok()``: the address may be stored.
- ``Reject(reason)``: a user-correctable problem with the address.
- ``Error(kind)``: an infrastructure condition; the user should try later.

Callers pattern-match on the type::

    match outcome:
        case Ok():
            ...
        case Reject(reason=RejectionReason.ALREADY_TAKEN):
            ...
        case Error(kind=kind):
            ...
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final, Union


class RejectionReason(str, Enum):
    """Expected, user-correctable outcomes. Never logged as errors."""

    INVALID_FORMAT = "invalid_format"
    SAME_AS_ACCOUNT_EMAIL = "same_as_account_email"
    ALREADY_TAKEN = "already_taken"
    ALIAS_LIMIT_EXCEEDED = "alias_limit_exceeded"
    RESERVED_DOMAIN = "reserved_domain"
    BLACKLISTED_DOMAIN = "blacklisted_domain"
    BLACKLISTED_EMAIL = "blacklisted_email"


class FailureKind(str, Enum):
    """Infrastructure conditions surfaced as "try again later"."""

    RATE_LIMITED = "rate_limited"
    VERIFICATION_UNAVAILABLE = "verification_unavailable"


# English defaults keyed by message key; callers translate the key.
MESSAGES: Final[dict[str, str]] = {
    "recovery_email_accepted": "Recovery email address is valid.",
    RejectionReason.INVALID_FORMAT.value: "Invalid Recovery Email",
    RejectionReason.SAME_AS_ACCOUNT_EMAIL.value: (
        "Error! User email address cannot be saved as recovery email address!"
    ),
    RejectionReason.ALREADY_TAKEN.value: "Recovery email address is already taken.",
    RejectionReason.ALIAS_LIMIT_EXCEEDED.value: "This email address is invalid, please use another one.",
    RejectionReason.RESERVED_DOMAIN.value: (
        "You cannot set an email address with a reserved domain as recovery email address."
    ),
    RejectionReason.BLACKLISTED_DOMAIN.value: (
        "The domain of this email address is blacklisted. Please provide another recovery address."
    ),
    RejectionReason.BLACKLISTED_EMAIL.value: (
        "The email address is disposable or not deliverable. Please provide another recovery address."
    ),
    FailureKind.RATE_LIMITED.value: "The email could not be verified. Please try again later.",
    FailureKind.VERIFICATION_UNAVAILABLE.value: "The email could not be verified. Please try again later.",
}


@dataclass(frozen=True, slots=True)
class Ok:
    """The candidate passed every check."""

    @property
    def message_key(self) -> str:
        return "recovery_email_accepted"

    @property
    def message(self) -> str:
        return MESSAGES[self.message_key]


@dataclass(frozen=True, slots=True)
class Reject:
    """The candidate is unacceptable for ``reason``."""

    reason: RejectionReason

    @property
    def message_key(self) -> str:
        return self.reason.value

    @property
    def message(self) -> str:
        return MESSAGES[self.message_key]


@dataclass(frozen=True, slots=True)
class Error:
    """Validation could not be completed because of ``kind``."""

    kind: FailureKind

    @property
    def message_key(self) -> str:
        return self.kind.value

    @property
    def message(self) -> str:
        return MESSAGES[self.message_key]


LocalRuleOutcome = Union[Ok, Reject]
ValidationOutcome = Union[Ok, Reject, Error]
