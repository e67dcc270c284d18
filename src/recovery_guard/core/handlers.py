"""
Global exception handlers for the FastAPI application.

This module translates the custom application exceptions into HTTP
responses. Expected validation outcomes (rejections) are not exceptions and
never reach these handlers; the routes return them as regular responses.

Every error body has the shape ``{"detail": <message>, "code": <error code>}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from recovery_guard.core.exceptions import (
    TRY_AGAIN_LATER,
    ConfigurationError,
    RateLimitError,
    RecoveryGuardError,
    UserStoreError,
    VerificationError,
)

__all__ = [
    "rate_limit_error_handler",
    "verification_error_handler",
    "user_store_error_handler",
    "recovery_guard_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def rate_limit_error_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Handles `RateLimitError` and its subclasses, returning a `429 Too Many Requests`."""
    logger.warning(
        "rate_limit_exceeded",
        error_code=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": exc.message, "code": exc.code},
    )


async def verification_error_handler(request: Request, exc: RecoveryGuardError) -> JSONResponse:
    """Handles `VerificationError` and `ConfigurationError`, returning a `503 Service Unavailable`.

    The client only learns that it should try again later; the cause is logged.
    """
    logger.error(
        "verification_unavailable",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": TRY_AGAIN_LATER, "code": exc.code},
    )


async def user_store_error_handler(request: Request, exc: UserStoreError) -> JSONResponse:
    """Handles `UserStoreError`, returning a `500 Internal Server Error`."""
    logger.critical(
        "user_store_error",
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred.", "code": exc.code},
    )


async def recovery_guard_error_handler(request: Request, exc: RecoveryGuardError) -> JSONResponse:
    """Handles any other `RecoveryGuardError`, returning a `400 Bad Request`."""
    logger.warning(
        "application_error",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so the base
    `RecoveryGuardError` handler only sees errors without a specific one.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(RateLimitError, rate_limit_error_handler)
    app.add_exception_handler(VerificationError, verification_error_handler)
    app.add_exception_handler(ConfigurationError, verification_error_handler)
    app.add_exception_handler(UserStoreError, user_store_error_handler)
    app.add_exception_handler(RecoveryGuardError, recovery_guard_error_handler)
