"""External email verification API access."""

from .retrying_client import RetryingVerificationClient, domain_verdict, email_verdict
from .verify_mail_api import VerifyMailApi

__all__ = ["RetryingVerificationClient", "VerifyMailApi", "domain_verdict", "email_verdict"]
