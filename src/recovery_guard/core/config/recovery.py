"""
Recovery email validation settings.

These are the knobs of the validation pipeline: the external verification API,
the reserved platform domains, the alias limit and the rate limits guarding
the verification API.
"""
from typing import List, Union

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class RecoverySettings(BaseSettings):
    """
    Defines settings consumed by the recovery email validation pipeline.

    Security Note:
        - VERIFY_MAIL_API_KEY is a paid credential; it is sent as a query
          parameter, so request URLs must never be logged verbatim.
    Performance Note:
        - EMAIL_CHECK_RATE_LIMIT and DOMAIN_CHECK_RATE_LIMIT must stay at or
          below the plan limits of the verification API. Requests above the
          rate wait for a free slot instead of hitting the API.
    """
    VERIFY_MAIL_API_KEY: SecretStr = SecretStr("")
    VERIFY_MAIL_API_URL: str = "https://verifymail.io/api/{target}"
    VERIFY_MAIL_TIMEOUT: float = Field(gt=0, default=15.0)
    VERIFY_MAIL_MAX_RETRIES: int = Field(ge=1, default=10)
    VERIFY_MAIL_INITIAL_INTERVAL_MS: int = Field(gt=0, default=1000)

    LEGACY_DOMAIN: str = ""
    MAIN_DOMAIN: str = ""
    RECOVERY_EMAIL_ALIAS_LIMIT: int = Field(ge=-1, default=5)

    EMAIL_CHECK_RATE_LIMIT: int = Field(ge=1, default=2)
    DOMAIN_CHECK_RATE_LIMIT: int = Field(ge=1, default=15)
    RATE_LIMIT_WINDOW_SECONDS: float = Field(gt=0, default=1.0)
    RATE_LIMIT_MAX_WAIT_ATTEMPTS: int = Field(ge=0, default=10)

    POPULAR_DOMAINS: Union[str, List[str]] = Field(
        default=[
            "gmail.com",
            "googlemail.com",
            "yahoo.com",
            "hotmail.com",
            "outlook.com",
            "live.com",
            "icloud.com",
            "proton.me",
            "protonmail.com",
            "gmx.de",
            "web.de",
        ]
    )
    CUSTOM_BLACKLISTED_DOMAINS: Union[str, List[str]] = Field(default_factory=list)

    VERIFICATION_EMAIL_ATTEMPT_LIMIT: int = Field(ge=1, default=3)
    VERIFICATION_EMAIL_ATTEMPT_WINDOW_SECONDS: int = Field(ge=1, default=3600)

    @field_validator("POPULAR_DOMAINS", "CUSTOM_BLACKLISTED_DOMAINS", mode="before")
    @classmethod
    def split_domain_list(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of domains into a lower-cased list.

        Args:
            v: Input value as a string or list of domains.

        Returns:
            List of stripped, lower-cased domains without empty entries.
        """
        if isinstance(v, str):
            v = v.split(",")
        return [domain.strip().lower() for domain in v if domain and domain.strip()]

    @field_validator("LEGACY_DOMAIN", "MAIN_DOMAIN")
    @classmethod
    def normalize_domain(cls, v: str) -> str:
        return v.strip().lower()
