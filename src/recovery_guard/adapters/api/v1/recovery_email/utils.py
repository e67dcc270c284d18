from starlette import status as http_status

from recovery_guard.domain.value_objects import (
    Error,
    FailureKind,
    Ok,
    Reject,
    ValidationOutcome,
)

from .schemas import RecoveryEmailResponse

_FAILURE_STATUS = {
    FailureKind.RATE_LIMITED: http_status.HTTP_429_TOO_MANY_REQUESTS,
    FailureKind.VERIFICATION_UNAVAILABLE: http_status.HTTP_503_SERVICE_UNAVAILABLE,
}


def outcome_to_response(outcome: ValidationOutcome) -> tuple[int, RecoveryEmailResponse]:
    """Maps a validation outcome to an HTTP status code and response envelope."""
    if isinstance(outcome, Ok):
        return http_status.HTTP_200_OK, RecoveryEmailResponse(
            status="ok", code=outcome.message_key, message=outcome.message
        )
    if isinstance(outcome, Reject):
        return http_status.HTTP_200_OK, RecoveryEmailResponse(
            status="rejected", code=outcome.message_key, message=outcome.message
        )
    if isinstance(outcome, Error):
        return _FAILURE_STATUS[outcome.kind], RecoveryEmailResponse(
            status="error", code=outcome.message_key, message=outcome.message
        )
    raise TypeError(f"Unexpected validation outcome: {outcome!r}")
