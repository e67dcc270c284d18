"""Dry-run validation of a candidate recovery email.

Runs the validation pipeline and reports the outcome without storing
anything. Rejections are regular ``200`` responses with ``status="rejected"``;
only infrastructure conditions produce ``429`` or ``503``.
"""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from recovery_guard.adapters.api.v1.recovery_email.schemas import (
    RecoveryEmailRequest,
    RecoveryEmailResponse,
)
from recovery_guard.adapters.api.v1.recovery_email.utils import outcome_to_response
from recovery_guard.domain.value_objects import UserContext
from recovery_guard.infrastructure.dependency_injection.recovery_dependencies import (
    RecoveryEmailServiceDep,
    ValidationPipelineDep,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=RecoveryEmailResponse,
    summary="Validate a recovery email",
    responses={
        200: {"description": "The address was accepted or rejected"},
        429: {"description": "Verification rate limit reached, try again later"},
        503: {"description": "Verification API unavailable, try again later"},
    },
)
async def validate_recovery_email(
    payload: RecoveryEmailRequest,
    pipeline: ValidationPipelineDep,
    recovery_service: RecoveryEmailServiceDep,
) -> JSONResponse:
    context: UserContext = await recovery_service.build_user_context(
        payload.user_id, current_email=payload.account_email, locale=payload.language
    )
    outcome = await pipeline.validate(payload.recovery_email, context)
    status_code, body = outcome_to_response(outcome)
    logger.debug("recovery_email_validate_completed", user_id=payload.user_id, code=body.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())
