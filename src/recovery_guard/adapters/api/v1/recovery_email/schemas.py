"""Request and response models for the recovery email endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from recovery_guard.core.config.settings import settings


class RecoveryEmailRequest(BaseModel):
    """Payload expected by ``POST /recovery-email/validate`` and ``PUT /recovery-email``.

    An empty ``recovery_email`` clears the recovery email.
    """

    user_id: str = Field(..., min_length=1, max_length=64, examples=["42"])
    account_email: str = Field("", max_length=320, examples=["alice@platform.example"])
    recovery_email: str = Field("", max_length=320, examples=["alice@gmail.com"])
    language: str = Field(settings.DEFAULT_LANGUAGE, max_length=8, examples=["en"])


class RecoveryEmailResponse(BaseModel):
    """Envelope returned for every validation outcome."""

    status: Literal["ok", "rejected", "error"]
    code: str
    message: str
