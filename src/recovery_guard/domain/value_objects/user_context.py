"""Read-only snapshot of the user a recovery email is validated for."""

from dataclasses import dataclass
from typing import Optional

from .candidate_email import AliasParts, split_alias


@dataclass(frozen=True, slots=True)
class UserContext:
    """Everything the validation rules need to know about the calling user.

    The snapshot is built by the caller before validation and discarded
    afterwards. Validation never writes back to user storage.

    Attributes:
        user_id: Identifier of the user in the attribute store.
        current_email: The account's own email address, in its stored format.
        current_recovery_email: The verified recovery email, or ``""``.
        current_unverified_recovery_email: The pending recovery email, or ``""``.
        locale: Preferred language for user-facing messages.
    """

    user_id: str
    current_email: str = ""
    current_recovery_email: str = ""
    current_unverified_recovery_email: str = ""
    locale: str = "en"

    def owns_recovery_email(self, email: str) -> bool:
        """True when ``email`` is exactly one of the user's current recovery values."""
        return email in (self.current_recovery_email, self.current_unverified_recovery_email)

    @property
    def recovery_alias_parts(self) -> tuple[Optional[AliasParts], Optional[AliasParts]]:
        """Decomposition of the verified and unverified recovery emails."""
        return (
            split_alias(self.current_recovery_email) if self.current_recovery_email else None,
            split_alias(self.current_unverified_recovery_email)
            if self.current_unverified_recovery_email
            else None,
        )
