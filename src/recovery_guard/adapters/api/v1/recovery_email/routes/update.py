"""Validate and store a new recovery email.

The address is stored as *unverified* only after the pipeline accepted it
and the per-user verification mail throttle admitted the request. An empty
address clears both the verified and the pending value.
"""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from recovery_guard.adapters.api.v1.recovery_email.schemas import (
    RecoveryEmailRequest,
    RecoveryEmailResponse,
)
from recovery_guard.adapters.api.v1.recovery_email.utils import outcome_to_response
from recovery_guard.domain.value_objects import CandidateEmail, Ok
from recovery_guard.infrastructure.dependency_injection.recovery_dependencies import (
    RecoveryEmailServiceDep,
    ValidationPipelineDep,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.put(
    "",
    response_model=RecoveryEmailResponse,
    summary="Set or clear the recovery email",
    responses={
        200: {"description": "The address was stored, cleared or rejected"},
        429: {"description": "Too many attempts or verification rate limit reached"},
        503: {"description": "Verification API unavailable, try again later"},
    },
)
async def update_recovery_email(
    payload: RecoveryEmailRequest,
    pipeline: ValidationPipelineDep,
    recovery_service: RecoveryEmailServiceDep,
) -> JSONResponse:
    """Validates the address and, when accepted, stores it pending verification.

    Raises:
        TooManyVerificationAttemptsError: The user requested too many
            verification mails recently (mapped to ``429``).
    """
    request_logger = logger.bind(user_id=payload.user_id, endpoint="update_recovery_email")
    candidate = CandidateEmail(payload.recovery_email)

    context = await recovery_service.build_user_context(
        payload.user_id, current_email=payload.account_email, locale=payload.language
    )
    outcome = await pipeline.validate(candidate, context)

    if isinstance(outcome, Ok):
        if candidate.is_empty:
            await recovery_service.clear_recovery_email(payload.user_id)
        elif not context.owns_recovery_email(candidate.value):
            await recovery_service.limit_verification_email(payload.user_id)
            await recovery_service.update_recovery_email(payload.user_id, candidate.value)
        else:
            request_logger.debug("recovery_email_unchanged")

    status_code, body = outcome_to_response(outcome)
    request_logger.info("recovery_email_update_completed", status=body.status, code=body.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())
