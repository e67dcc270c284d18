"""Domain service for reading and committing a user's recovery email.

The validation pipeline only decides. This service performs the storage side
of the feature: building the `UserContext` snapshot before validation,
committing an accepted address as *unverified*, promoting it once the user
confirmed it, and throttling how many verification mails a user may trigger.
"""

from typing import Optional

import structlog

from recovery_guard.core.rate_limiting import VerificationAttemptThrottle
from recovery_guard.domain.interfaces import IUserAttributeStore
from recovery_guard.domain.value_objects import UserContext, mask_email

from .rule_engine import RECOVERY_APP_ID, RECOVERY_EMAIL_KEY, UNVERIFIED_RECOVERY_EMAIL_KEY

logger = structlog.get_logger(__name__)


class RecoveryEmailService:
    """Coordinate persistence of recovery emails through the attribute store."""

    def __init__(self, user_store: IUserAttributeStore, attempt_throttle: Optional[VerificationAttemptThrottle] = None):
        self._user_store = user_store
        self._attempt_throttle = attempt_throttle

    async def get_recovery_email(self, user_id: str) -> str:
        return await self._user_store.get_attribute(user_id, RECOVERY_APP_ID, RECOVERY_EMAIL_KEY)

    async def set_recovery_email(self, user_id: str, value: str = "") -> None:
        await self._user_store.set_attribute(user_id, RECOVERY_APP_ID, RECOVERY_EMAIL_KEY, value)

    async def get_unverified_recovery_email(self, user_id: str) -> str:
        return await self._user_store.get_attribute(user_id, RECOVERY_APP_ID, UNVERIFIED_RECOVERY_EMAIL_KEY)

    async def set_unverified_recovery_email(self, user_id: str, value: str = "") -> None:
        await self._user_store.set_attribute(user_id, RECOVERY_APP_ID, UNVERIFIED_RECOVERY_EMAIL_KEY, value)

    async def delete_unverified_recovery_email(self, user_id: str) -> None:
        await self._user_store.delete_attribute(user_id, RECOVERY_APP_ID, UNVERIFIED_RECOVERY_EMAIL_KEY)

    async def build_user_context(self, user_id: str, current_email: str = "", locale: str = "en") -> UserContext:
        """Snapshot the user's current recovery values for validation."""
        return UserContext(
            user_id=user_id,
            current_email=current_email,
            current_recovery_email=await self.get_recovery_email(user_id),
            current_unverified_recovery_email=await self.get_unverified_recovery_email(user_id),
            locale=locale,
        )

    async def update_recovery_email(self, user_id: str, recovery_email: str) -> None:
        """Store an accepted address as pending and drop the verified one.

        The address becomes the recovery email only after
        `make_recovery_email_verified`.
        """
        await self.set_unverified_recovery_email(user_id, recovery_email)
        await self.set_recovery_email(user_id, "")
        logger.info(
            "recovery_email_updated",
            user_id=user_id,
            email=mask_email(recovery_email) if recovery_email else "",
        )

    async def clear_recovery_email(self, user_id: str) -> None:
        await self.set_recovery_email(user_id, "")
        await self.delete_unverified_recovery_email(user_id)
        logger.info("recovery_email_cleared", user_id=user_id)

    async def make_recovery_email_verified(self, user_id: str) -> bool:
        """Promote the pending address to the verified recovery email.

        Returns:
            ``True`` if a pending address existed and was promoted.
        """
        pending = await self.get_unverified_recovery_email(user_id)
        if not pending:
            return False
        await self.set_recovery_email(user_id, pending)
        await self.delete_unverified_recovery_email(user_id)
        logger.info("recovery_email_verified", user_id=user_id, email=mask_email(pending))
        return True

    async def limit_verification_email(self, user_id: str) -> None:
        """Count a verification mail request against the per-user throttle.

        Raises:
            TooManyVerificationAttemptsError: If the user exceeded the limit.
        """
        if self._attempt_throttle is None:
            return
        await self._attempt_throttle.check(user_id)
