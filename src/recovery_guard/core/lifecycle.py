"""Application lifecycle management.

This module handles application startup and shutdown events: it builds the
process-wide collaborators of the validation pipeline (shared rate-limit
windows, blacklist oracle, verification client) and releases the network
resources they hold on shutdown.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from recovery_guard.core.config.settings import settings
from recovery_guard.core.logging import configure_logging, logger
from recovery_guard.infrastructure.database import (
    check_database_health,
    create_async_db_and_tables,
    dispose_engine,
)
from recovery_guard.infrastructure.dependency_injection.recovery_dependencies import (
    create_blacklist_oracle,
    create_rate_limiter,
    create_verification_client,
    create_window_store,
)
from recovery_guard.infrastructure.redis import close_redis_client, create_redis_client


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initializes shared resources on startup and closes them on shutdown.

        Args:
            app (FastAPI): The FastAPI application instance

        Raises:
            RuntimeError: If the database is unavailable during startup
        """
        # Startup
        configure_logging()
        if not await check_database_health():
            logger.error("database_unavailable_on_startup")
            raise RuntimeError("Database unavailable")
        await create_async_db_and_tables()

        redis_client = create_redis_client() if settings.RATE_LIMIT_BACKEND == "redis" else None
        http_client = httpx.AsyncClient(timeout=settings.VERIFY_MAIL_TIMEOUT)

        app.state.redis = redis_client
        app.state.http_client = http_client
        app.state.window_store = create_window_store(settings, redis_client)
        app.state.blacklist_oracle = create_blacklist_oracle(settings)
        app.state.rate_limiter = create_rate_limiter(app.state.window_store, settings)
        app.state.verification_client = create_verification_client(http_client, settings)

        logger.info(
            "application_startup",
            env=settings.APP_ENV,
            version=settings.VERSION,
            rate_limit_backend=settings.RATE_LIMIT_BACKEND,
        )

        yield

        # Shutdown
        await http_client.aclose()
        if redis_client is not None:
            await close_redis_client(redis_client)
        await dispose_engine()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
