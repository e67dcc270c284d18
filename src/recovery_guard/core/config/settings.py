"""Main application settings and configuration management.

This module composes the settings from the different modules (app, database,
redis, recovery) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, missing verification credentials only warn
- Test: Uses .env.test, missing verification credentials only warn
- Staging: Uses .env.staging, verification credentials required
- Production: Uses .env.production, verification credentials required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from recovery_guard.core.exceptions import ConfigurationError

from .app import AppSettings
from .database import DatabaseSettings
from .recovery import RecoverySettings
from .redis import RedisSettings

logger = logging.getLogger(__name__)

# AppSettings is listed last so its fields (APP_ENV) are validated first.
class Settings(RecoverySettings, DatabaseSettings, RedisSettings, AppSettings):
    """The main settings class that aggregates all application configurations.

    Security Note:
        - VERIFY_MAIL_API_KEY and the database/redis passwords are secrets and
          must never be logged.
    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @property
    def is_lenient_environment(self) -> bool:
        return self.APP_ENV in ("development", "test")

    def validate_required_fields(self) -> None:
        """Validates that the recovery pipeline configuration is complete.

        Missing values are only logged in development and test so the service
        can start without a verification API account.

        Raises:
            ConfigurationError: If required fields are missing outside
                development/test.
        """
        missing_fields = []
        if not self.VERIFY_MAIL_API_KEY.get_secret_value():
            missing_fields.append("VERIFY_MAIL_API_KEY")
        if not self.LEGACY_DOMAIN:
            missing_fields.append("LEGACY_DOMAIN")
        if not self.MAIN_DOMAIN:
            missing_fields.append("MAIN_DOMAIN")

        if missing_fields:
            error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
            if self.is_lenient_environment:
                logger.warning(f"{self.APP_ENV} mode: {error_msg}")
            else:
                logger.error(error_msg)
                raise ConfigurationError(error_msg)
        else:
            logger.info("All required environment variables are set.")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }

    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        settings_instance = Settings(_env_file=env_file)
    elif Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
        settings_instance = Settings()
    else:
        logger.info(f"No .env file found, using environment variables only (environment: {env})")
        settings_instance = Settings()

    return settings_instance


# Singleton instance of the settings to be used across the application.
settings = create_settings()
settings.validate_required_fields()
