"""
Redis cache settings.
"""
from pydantic import Field, field_validator, ValidationInfo, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import logging

from recovery_guard.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class RedisSettings(BaseSettings):
    """
    Defines settings for the Redis connection backing the shared rate-limit windows.

    Security Note:
        - REDIS_PASSWORD must be set in staging/production to prevent unauthorized access.
    Performance Note:
        - RATE_LIMIT_BACKEND=memory keeps windows per process. Use redis when the
          verification API quota is shared by several workers or hosts.
    """
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = Field(ge=1, le=65535, default=6379)
    REDIS_PASSWORD: SecretStr = Field(default=SecretStr(""), validate_default=True)
    REDIS_SSL: bool = False
    REDIS_URL: str = Field(default="", validate_default=True)

    RATE_LIMIT_BACKEND: str = Field(default="memory", pattern="^(memory|redis)$")
    RATE_LIMIT_KEY_PREFIX: str = "recovery_guard:rate_limit"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("REDIS_PASSWORD")
    @classmethod
    def validate_redis_password(cls, value: SecretStr, info: ValidationInfo) -> SecretStr:
        """
        Ensures REDIS_PASSWORD is set for staging/production environments.

        Raises:
            ConfigurationError: If password is not set in staging/production.
        """
        app_env = info.data.get("APP_ENV", "development")
        if app_env in ("staging", "production") and not value.get_secret_value():
            logger.error(f"REDIS_PASSWORD must be set in {app_env} environment.")
            raise ConfigurationError(
                "REDIS_PASSWORD must be set in staging/production environments"
            )
        return value

    @field_validator("REDIS_URL", mode="after")
    @classmethod
    def assemble_redis_url(cls, v: str, info: ValidationInfo) -> str:
        """
        Assembles the Redis connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or an empty string.
            info: Validation context with other field values.

        Returns:
            Assembled or provided Redis URL.
        """
        if v:
            return v

        values = info.data
        protocol = "rediss" if values.get("REDIS_SSL") else "redis"
        redis_password = values.get("REDIS_PASSWORD")
        secret = redis_password.get_secret_value() if redis_password else ""
        password = f":{secret}@" if secret else ""

        url = f"{protocol}://{password}{values.get('REDIS_HOST')}:{values.get('REDIS_PORT')}/0"
        logger.debug("Assembled REDIS_URL (password masked for security).")
        return url
