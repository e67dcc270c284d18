"""Domain value objects for recovery email validation."""

from .candidate_email import AliasParts, CandidateEmail, mask_email, split_alias
from .user_context import UserContext
from .validation_outcome import (
    Error,
    FailureKind,
    LocalRuleOutcome,
    Ok,
    Reject,
    RejectionReason,
    ValidationOutcome,
)
from .verification import VerificationResult, VerificationVerdict

__all__ = [
    "AliasParts",
    "CandidateEmail",
    "Error",
    "FailureKind",
    "LocalRuleOutcome",
    "Ok",
    "Reject",
    "RejectionReason",
    "UserContext",
    "ValidationOutcome",
    "VerificationResult",
    "VerificationVerdict",
    "mask_email",
    "split_alias",
]
