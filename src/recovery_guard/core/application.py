"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a FastAPI application with
the exception handlers and routers registered.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from recovery_guard.adapters.api.v1 import api_router
from recovery_guard.core.config.settings import settings
from recovery_guard.core.handlers import register_exception_handlers
from recovery_guard.core.lifecycle import create_lifespan_manager


def create_application() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Validation of recovery email addresses before they are stored.",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=create_lifespan_manager(),
        default_response_class=JSONResponse,
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    return app
