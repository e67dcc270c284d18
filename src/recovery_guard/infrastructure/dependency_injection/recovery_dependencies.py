"""Dependency injection for the recovery email feature.

Two kinds of objects are wired here:

- Process-wide collaborators (window store, limiter, blacklist oracle,
  verification client). They hold shared state, so they are built once by the
  application lifespan and stored on ``app.state``. Every pipeline instance
  must see the same limiter windows.
- Request-scoped services (repository, rule engine, pipeline, recovery email
  service), built per request by FastAPI from the shared collaborators and a
  database session.
"""

from typing import Annotated, Optional

import httpx
from fastapi import Depends, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from recovery_guard.core.config.settings import Settings, settings
from recovery_guard.core.rate_limiting import (
    InMemoryWindowStore,
    RedisWindowStore,
    SlidingWindowLimiter,
    VerificationAttemptThrottle,
)
from recovery_guard.domain.interfaces import IBlacklistOracle, IUserAttributeStore, IWindowStore
from recovery_guard.domain.services.recovery_email import (
    RecoveryEmailRuleEngine,
    RecoveryEmailService,
    RecoveryEmailValidationPipeline,
)
from recovery_guard.infrastructure.database import get_async_db
from recovery_guard.infrastructure.repositories import UserAttributeRepository
from recovery_guard.infrastructure.services.blacklist_oracle import ConfiguredBlacklistOracle
from recovery_guard.infrastructure.services.verification import RetryingVerificationClient, VerifyMailApi

# ---------------------------------------------------------------------------
# Builders for process-wide collaborators (called from the lifespan)
# ---------------------------------------------------------------------------


def create_window_store(config: Settings = settings, redis_client: Optional[Redis] = None) -> IWindowStore:
    """Returns the window store selected by ``RATE_LIMIT_BACKEND``."""
    if config.RATE_LIMIT_BACKEND == "redis":
        if redis_client is None:
            raise ValueError("A Redis client is required for RATE_LIMIT_BACKEND=redis")
        return RedisWindowStore(redis_client, key_prefix=config.RATE_LIMIT_KEY_PREFIX)
    return InMemoryWindowStore()


def create_blacklist_oracle(config: Settings = settings) -> IBlacklistOracle:
    return ConfiguredBlacklistOracle(
        popular_domains=config.POPULAR_DOMAINS,
        blacklisted_domains=config.CUSTOM_BLACKLISTED_DOMAINS,
    )


def create_rate_limiter(store: IWindowStore, config: Settings = settings) -> SlidingWindowLimiter:
    return SlidingWindowLimiter(store, window_seconds=config.RATE_LIMIT_WINDOW_SECONDS)


def create_verification_client(
    http_client: httpx.AsyncClient, config: Settings = settings
) -> RetryingVerificationClient:
    api = VerifyMailApi(
        http_client,
        api_key=config.VERIFY_MAIL_API_KEY.get_secret_value(),
        url_template=config.VERIFY_MAIL_API_URL,
        timeout=config.VERIFY_MAIL_TIMEOUT,
    )
    return RetryingVerificationClient(
        api,
        max_retries=config.VERIFY_MAIL_MAX_RETRIES,
        initial_interval_ms=config.VERIFY_MAIL_INITIAL_INTERVAL_MS,
    )


# ---------------------------------------------------------------------------
# Shared collaborators, read from app.state
# ---------------------------------------------------------------------------


def get_window_store(request: Request) -> IWindowStore:
    return request.app.state.window_store


def get_blacklist_oracle(request: Request) -> IBlacklistOracle:
    return request.app.state.blacklist_oracle


def get_rate_limiter(request: Request) -> SlidingWindowLimiter:
    return request.app.state.rate_limiter


def get_verification_client(request: Request) -> RetryingVerificationClient:
    return request.app.state.verification_client


# ---------------------------------------------------------------------------
# Request-scoped services
# ---------------------------------------------------------------------------

AsyncDB = Annotated[AsyncSession, Depends(get_async_db)]


def get_user_attribute_store(db: AsyncDB) -> IUserAttributeStore:
    return UserAttributeRepository(db)


def get_rule_engine(
    user_store: IUserAttributeStore = Depends(get_user_attribute_store),
    blacklist: IBlacklistOracle = Depends(get_blacklist_oracle),
) -> RecoveryEmailRuleEngine:
    """Rule engine configured with the platform domains and alias limit."""
    return RecoveryEmailRuleEngine(
        user_store,
        blacklist,
        reserved_domains=(settings.LEGACY_DOMAIN, settings.MAIN_DOMAIN),
        alias_limit=settings.RECOVERY_EMAIL_ALIAS_LIMIT,
    )


def get_validation_pipeline(
    rule_engine: RecoveryEmailRuleEngine = Depends(get_rule_engine),
    blacklist: IBlacklistOracle = Depends(get_blacklist_oracle),
    limiter: SlidingWindowLimiter = Depends(get_rate_limiter),
    verification_client: RetryingVerificationClient = Depends(get_verification_client),
) -> RecoveryEmailValidationPipeline:
    return RecoveryEmailValidationPipeline(
        rule_engine,
        blacklist,
        limiter,
        verification_client,
        email_rate_limit=settings.EMAIL_CHECK_RATE_LIMIT,
        domain_rate_limit=settings.DOMAIN_CHECK_RATE_LIMIT,
        max_wait_attempts=settings.RATE_LIMIT_MAX_WAIT_ATTEMPTS,
    )


def get_attempt_throttle(store: IWindowStore = Depends(get_window_store)) -> VerificationAttemptThrottle:
    return VerificationAttemptThrottle(
        store,
        limit=settings.VERIFICATION_EMAIL_ATTEMPT_LIMIT,
        window_seconds=settings.VERIFICATION_EMAIL_ATTEMPT_WINDOW_SECONDS,
    )


def get_recovery_email_service(
    user_store: IUserAttributeStore = Depends(get_user_attribute_store),
    attempt_throttle: VerificationAttemptThrottle = Depends(get_attempt_throttle),
) -> RecoveryEmailService:
    return RecoveryEmailService(user_store, attempt_throttle)


ValidationPipelineDep = Annotated[RecoveryEmailValidationPipeline, Depends(get_validation_pipeline)]
RecoveryEmailServiceDep = Annotated[RecoveryEmailService, Depends(get_recovery_email_service)]
