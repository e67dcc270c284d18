"""Results of a single call to the external verification API."""

from dataclasses import dataclass, field
from enum import Enum


class VerificationVerdict(str, Enum):
    """Decision derived from one verification API response.

    The email endpoint yields ALLOWED, DISPOSABLE or UNDELIVERABLE; the domain
    endpoint yields ALLOWED, DISPOSABLE or NO_MAIL_EXCHANGER. Transient and
    permanent call failures are raised as exceptions instead
    (`TransientVerificationError`, `PermanentVerificationError`).
    """

    ALLOWED = "allowed"
    DISPOSABLE = "disposable"
    UNDELIVERABLE = "undeliverable"
    NO_MAIL_EXCHANGER = "no_mail_exchanger"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """A verdict plus the enrichment data returned by the domain endpoint.

    Attributes:
        target: The email address or domain that was checked.
        verdict: The mapped decision.
        related_domains: Domains the API reports as belonging to the same
            disposable provider (domain checks only).
    """

    target: str
    verdict: VerificationVerdict
    related_domains: tuple[str, ...] = field(default_factory=tuple)
