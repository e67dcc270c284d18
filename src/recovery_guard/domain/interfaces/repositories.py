"""Repository interfaces for abstracting user attribute persistence.

The domain layer reads and writes per-user values (recovery emails) through
this port without being coupled to a specific store. The concrete SQL adapter
lives in `recovery_guard.infrastructure.repositories`.
"""

from abc import ABC, abstractmethod
from typing import List


class IUserAttributeStore(ABC):
    """Contract for a key/value store holding named string values per user.

    Values are namespaced by an application id so several features can share
    one table. A missing value reads as ``""``.
    """

    @abstractmethod
    async def get_attribute(self, user_id: str, app_id: str, key: str) -> str:
        """Returns the stored value, or ``""`` when none exists."""
        raise NotImplementedError

    @abstractmethod
    async def set_attribute(self, user_id: str, app_id: str, key: str, value: str) -> None:
        """Creates or replaces the value."""
        raise NotImplementedError

    @abstractmethod
    async def delete_attribute(self, user_id: str, app_id: str, key: str) -> None:
        """Removes the value; deleting a missing value is not an error."""
        raise NotImplementedError

    @abstractmethod
    async def find_users_by_attribute(
        self, app_id: str, key: str, value: str, case_insensitive: bool = True
    ) -> List[str]:
        """Returns the ids of all users whose value equals ``value``.

        Args:
            app_id: Attribute namespace.
            key: Attribute name.
            value: Value to look for.
            case_insensitive: Compare without regard to case.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_users_by_attribute_affixes(
        self, app_id: str, key: str, prefix: str, suffix: str
    ) -> List[str]:
        """Returns the ids of users whose value starts with ``prefix`` and ends with ``suffix``.

        Matching is case-insensitive and ``prefix``/``suffix`` are literal
        text. Used to count ``base+<any tag>@domain`` aliases.
        """
        raise NotImplementedError
