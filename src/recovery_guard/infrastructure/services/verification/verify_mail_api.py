"""HTTP adapter for the VerifyMail email/domain verification API.

``GET https://<host>/api/{emailOrDomain}?key={apiKey}`` returns a JSON
object. The email endpoint reports ``disposable`` and ``deliverable_email``;
the domain endpoint reports ``disposable``, ``mx`` and ``related_domains``.

Status handling:
- 200 with a JSON object: returned as a dict.
- 429: `TransientVerificationError`, the only condition worth retrying.
- Any other status, a network error, a timeout or a body that is not a JSON
  object: `PermanentVerificationError`.
"""

from typing import Any, Dict
from urllib.parse import quote

import httpx
import structlog

from recovery_guard.core.exceptions import (
    ConfigurationError,
    PermanentVerificationError,
    TransientVerificationError,
)
from recovery_guard.domain.interfaces import IVerificationApi
from recovery_guard.domain.value_objects import mask_email

logger = structlog.get_logger(__name__)

DEFAULT_URL_TEMPLATE = "https://verifymail.io/api/{target}"


class VerifyMailApi(IVerificationApi):
    """`IVerificationApi` implementation on top of a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        url_template: str = DEFAULT_URL_TEMPLATE,
        timeout: float = 15.0,
    ):
        self._client = http_client
        self._api_key = api_key
        self._url_template = url_template
        self._timeout = timeout

    async def lookup(self, target: str) -> Dict[str, Any]:
        if not self._api_key:
            logger.error("verify_mail_api_key_missing")
            raise ConfigurationError("VerifyMail API key is not configured.")

        url = self._url_template.format(target=quote(target, safe="@"))
        masked_target = mask_email(target) if "@" in target else target

        try:
            response = await self._client.get(url, params={"key": self._api_key}, timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.error(
                "verify_mail_request_failed",
                target=masked_target,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PermanentVerificationError(f"Verification request failed: {type(exc).__name__}") from exc

        if response.status_code == 429:
            logger.warning("verify_mail_rate_limited", target=masked_target)
            raise TransientVerificationError()

        if response.status_code != 200:
            logger.error("verify_mail_unexpected_status", target=masked_target, status_code=response.status_code)
            raise PermanentVerificationError(
                f"Verification API answered with status {response.status_code}.",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("verify_mail_invalid_response", target=masked_target, body=response.text[:200])
            raise PermanentVerificationError("Invalid response received from verification API.") from exc

        if not isinstance(data, dict):
            logger.error("verify_mail_invalid_response", target=masked_target, body=response.text[:200])
            raise PermanentVerificationError("Invalid response received from verification API.")

        return data
