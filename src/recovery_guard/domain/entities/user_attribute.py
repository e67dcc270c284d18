from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, UniqueConstraint
from sqlmodel import Column, Field, SQLModel, String


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserAttribute(SQLModel, table=True):
    """A named string value stored for one user.

    Values are namespaced by ``app_id`` so several features can share the
    table; the recovery email feature uses ``app_id="email-recovery"`` with the
    keys ``recovery-email`` and ``unverified-recovery-email``.

    Attributes:
        id: Surrogate primary key.
        user_id: Opaque id of the owning user.
        app_id: Attribute namespace.
        key: Attribute name within the namespace.
        value: The stored value, exactly as submitted.
        updated_at: Time of the last write.
    """

    __tablename__ = "user_attributes"
    __table_args__ = (
        UniqueConstraint("user_id", "app_id", "key", name="uq_user_attributes_user_app_key"),
        Index("ix_user_attributes_app_key", "app_id", "key"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(sa_column=Column(String(64), nullable=False, index=True))
    app_id: str = Field(sa_column=Column(String(64), nullable=False))
    key: str = Field(sa_column=Column(String(64), nullable=False))
    value: str = Field(default="", sa_column=Column(String(320), nullable=False, default=""))
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow),
    )
