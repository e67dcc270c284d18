"""Main application entry point for the FastAPI application.

Run with ``uvicorn recovery_guard.main:app`` or ``python -m recovery_guard.main``.
"""

import uvicorn

from recovery_guard.core.application import create_application
from recovery_guard.core.config.settings import settings

# Create the FastAPI application
app = create_application()


if __name__ == "__main__":
    uvicorn.run(
        "recovery_guard.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        workers=settings.API_WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
    )
