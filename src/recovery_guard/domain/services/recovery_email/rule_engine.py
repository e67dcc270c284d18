"""Local validation rules for a candidate recovery email.

The rules run in a fixed order and stop at the first failure; each rule may
assume every earlier rule passed:

1. Format
2. Not the account's own email
3. Not already another user's (verified or pending) recovery email
4. Alias limit for ``base+tag@domain`` addresses
5. Not a reserved platform domain
6. Not on the operator blacklist

None of them talk to the external verification API. The empty candidate
(clearing the recovery email) is always accepted.
"""

from typing import Iterable, Optional, Union

import structlog

from recovery_guard.domain.interfaces import IBlacklistOracle, IUserAttributeStore
from recovery_guard.domain.value_objects import (
    CandidateEmail,
    LocalRuleOutcome,
    Ok,
    Reject,
    RejectionReason,
    UserContext,
)

logger = structlog.get_logger(__name__)

RECOVERY_APP_ID = "email-recovery"
RECOVERY_EMAIL_KEY = "recovery-email"
UNVERIFIED_RECOVERY_EMAIL_KEY = "unverified-recovery-email"

UNLIMITED_ALIASES = -1


class RecoveryEmailRuleEngine:
    """Applies the local recovery email rules.

    Args:
        user_store: Read access to other users' recovery emails.
        blacklist: Operator blacklist lookups.
        reserved_domains: The platform's own domains (legacy and main).
        alias_limit: How many other users may hold ``base+*@domain``
            aliases of one mailbox; ``-1`` disables the rule.
    """

    def __init__(
        self,
        user_store: IUserAttributeStore,
        blacklist: IBlacklistOracle,
        reserved_domains: Iterable[str] = (),
        alias_limit: int = 5,
    ):
        self._user_store = user_store
        self._blacklist = blacklist
        self._reserved_domains = frozenset(d.strip().lower() for d in reserved_domains if d and d.strip())
        self._alias_limit = alias_limit

    async def check_local_rules(
        self, candidate: Union[CandidateEmail, str], context: UserContext
    ) -> LocalRuleOutcome:
        """Runs rules 1-6 against ``candidate``.

        Returns:
            ``Ok()`` or ``Reject(reason)`` for the first failing rule.
        """
        if not isinstance(candidate, CandidateEmail):
            candidate = CandidateEmail(candidate)
        if candidate.is_empty:
            return Ok()

        reason = await self._first_violation(candidate, context)
        if reason is None:
            return Ok()

        logger.info(
            "recovery_email_rejected",
            user_id=context.user_id,
            reason=reason.value,
            email=candidate.mask_for_logging(),
        )
        return Reject(reason)

    async def _first_violation(
        self, candidate: CandidateEmail, context: UserContext
    ) -> Optional[RejectionReason]:
        if not candidate.is_valid_format:
            return RejectionReason.INVALID_FORMAT
        if self.is_same_as_account_email(candidate, context):
            return RejectionReason.SAME_AS_ACCOUNT_EMAIL
        if await self.is_taken(candidate, context):
            return RejectionReason.ALREADY_TAKEN
        if not await self.is_alias_allowed(candidate, context):
            return RejectionReason.ALIAS_LIMIT_EXCEEDED
        if self.is_reserved_domain(candidate):
            return RejectionReason.RESERVED_DOMAIN
        if await self._blacklist.is_custom_blacklisted(candidate.domain):
            return RejectionReason.BLACKLISTED_DOMAIN
        return None

    @staticmethod
    def is_same_as_account_email(candidate: CandidateEmail, context: UserContext) -> bool:
        # Exact, case-sensitive compare against the stored format.
        return bool(context.current_email) and candidate.raw == context.current_email

    async def is_taken(self, candidate: CandidateEmail, context: UserContext) -> bool:
        """True when another user already holds the address.

        Re-submitting one's own current (verified or pending) value is not a
        conflict. Stored values are compared exactly here, while the lookup
        among all users is case-insensitive.
        """
        if context.owns_recovery_email(candidate.value):
            return False

        for key in (RECOVERY_EMAIL_KEY, UNVERIFIED_RECOVERY_EMAIL_KEY):
            holders = await self._user_store.find_users_by_attribute(
                RECOVERY_APP_ID, key, candidate.value, case_insensitive=True
            )
            if holders:
                logger.debug("recovery_email_holders_found", key=key, holders=len(holders))
                return True
        return False

    async def is_alias_allowed(self, candidate: CandidateEmail, context: UserContext) -> bool:
        """Limits how many users may register aliases of one mailbox."""
        if not candidate.is_alias:
            return True

        parts = candidate.alias_parts
        if any(parts.same_mailbox(own) for own in context.recovery_alias_parts):
            return True
        if self._alias_limit == UNLIMITED_ALIASES:
            return True

        holders = await self._user_store.find_users_by_attribute_affixes(
            RECOVERY_APP_ID, RECOVERY_EMAIL_KEY, prefix=f"{parts.base}+", suffix=f"@{parts.domain}"
        )
        others = [user_id for user_id in holders if user_id != context.user_id]
        logger.debug(
            "recovery_email_alias_count",
            domain=parts.domain,
            count=len(others),
            limit=self._alias_limit,
        )
        return len(others) < self._alias_limit

    def is_reserved_domain(self, candidate: CandidateEmail) -> bool:
        return candidate.domain in self._reserved_domains
