"""User attribute repository implementation using SQLAlchemy.

This module implements `IUserAttributeStore` over the ``user_attributes``
table. Recovery emails are stored exactly as submitted; all lookups by value
are case-insensitive so ``Alice@Example.com`` and ``alice@example.com`` are
recognized as the same address.

Database errors are logged and re-raised as `UserStoreError`, so the API
layer can map them without knowing about SQLAlchemy.
"""

from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from recovery_guard.core.exceptions import UserStoreError
from recovery_guard.domain.entities import UserAttribute
from recovery_guard.domain.interfaces import IUserAttributeStore

logger = get_logger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escapes LIKE wildcards so ``value`` matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class UserAttributeRepository(IUserAttributeStore):
    """SQLAlchemy implementation of `IUserAttributeStore`.

    Args:
        db_session: Async session, typically one per request.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_attribute(self, user_id: str, app_id: str, key: str) -> str:
        statement = select(UserAttribute.value).where(
            UserAttribute.user_id == user_id,
            UserAttribute.app_id == app_id,
            UserAttribute.key == key,
        )
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            self._log_error("get_attribute", e, user_id=user_id, key=key)
            raise UserStoreError("Could not read user attribute.") from e
        value = result.scalars().first()
        return value or ""

    async def set_attribute(self, user_id: str, app_id: str, key: str, value: str) -> None:
        statement = select(UserAttribute).where(
            UserAttribute.user_id == user_id,
            UserAttribute.app_id == app_id,
            UserAttribute.key == key,
        )
        try:
            result = await self.db_session.execute(statement)
            attribute = result.scalars().first()
            if attribute is None:
                attribute = UserAttribute(user_id=user_id, app_id=app_id, key=key, value=value)
            else:
                attribute.value = value
            self.db_session.add(attribute)
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            self._log_error("set_attribute", e, user_id=user_id, key=key)
            raise UserStoreError("Could not store user attribute.") from e

        logger.debug("user_attribute_stored", user_id=user_id, app_id=app_id, key=key)

    async def delete_attribute(self, user_id: str, app_id: str, key: str) -> None:
        statement = delete(UserAttribute).where(
            UserAttribute.user_id == user_id,
            UserAttribute.app_id == app_id,
            UserAttribute.key == key,
        )
        try:
            await self.db_session.execute(statement)
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            self._log_error("delete_attribute", e, user_id=user_id, key=key)
            raise UserStoreError("Could not delete user attribute.") from e

        logger.debug("user_attribute_deleted", user_id=user_id, app_id=app_id, key=key)

    async def find_users_by_attribute(
        self, app_id: str, key: str, value: str, case_insensitive: bool = True
    ) -> List[str]:
        if case_insensitive:
            condition = func.lower(UserAttribute.value) == value.lower()
        else:
            condition = UserAttribute.value == value
        statement = (
            select(UserAttribute.user_id)
            .where(UserAttribute.app_id == app_id, UserAttribute.key == key, condition)
            .distinct()
        )
        return await self._user_ids(statement, "find_users_by_attribute", key)

    async def find_users_by_attribute_affixes(
        self, app_id: str, key: str, prefix: str, suffix: str
    ) -> List[str]:
        pattern = f"{escape_like(prefix.lower())}%{escape_like(suffix.lower())}"
        statement = (
            select(UserAttribute.user_id)
            .where(
                UserAttribute.app_id == app_id,
                UserAttribute.key == key,
                func.lower(UserAttribute.value).like(pattern, escape=LIKE_ESCAPE),
            )
            .distinct()
        )
        return await self._user_ids(statement, "find_users_by_attribute_affixes", key)

    async def _user_ids(self, statement, operation: str, key: str) -> List[str]:
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            self._log_error(operation, e, key=key)
            raise UserStoreError("Could not search user attributes.") from e
        user_ids = list(result.scalars().all())
        logger.debug("user_attribute_search_completed", operation=operation, key=key, matches=len(user_ids))
        return user_ids

    @staticmethod
    def _log_error(operation: str, error: Exception, **context) -> None:
        logger.error(
            "user_attribute_store_error",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )
