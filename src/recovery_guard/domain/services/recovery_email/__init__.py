"""Recovery email domain services."""

from .recovery_email_service import RecoveryEmailService
from .rule_engine import (
    RECOVERY_APP_ID,
    RECOVERY_EMAIL_KEY,
    UNLIMITED_ALIASES,
    UNVERIFIED_RECOVERY_EMAIL_KEY,
    RecoveryEmailRuleEngine,
)
from .validation_pipeline import (
    DOMAIN_CHECK_KEY,
    EMAIL_CHECK_KEY,
    RecoveryEmailValidationPipeline,
)

__all__ = [
    "DOMAIN_CHECK_KEY",
    "EMAIL_CHECK_KEY",
    "RECOVERY_APP_ID",
    "RECOVERY_EMAIL_KEY",
    "UNLIMITED_ALIASES",
    "UNVERIFIED_RECOVERY_EMAIL_KEY",
    "RecoveryEmailRuleEngine",
    "RecoveryEmailService",
    "RecoveryEmailValidationPipeline",
]
