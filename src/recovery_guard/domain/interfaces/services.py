"""Service interfaces for the collaborators of the validation pipeline."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence


class IBlacklistOracle(ABC):
    """Answers domain reputation questions for the pipeline.

    The data source behind it (admin-managed lists, a shared cache, ...) is
    not part of this package.
    """

    @abstractmethod
    async def is_custom_blacklisted(self, domain: str) -> bool:
        """True when the domain is on the operator-managed blacklist."""
        raise NotImplementedError

    @abstractmethod
    async def is_popular_domain(self, domain: str) -> bool:
        """True when the domain belongs to a large, trusted mail provider."""
        raise NotImplementedError

    @abstractmethod
    async def add_disposable_domain(self, domain: str, related_domains: Sequence[str] = ()) -> None:
        """Records a domain (and its sister domains) found to be disposable."""
        raise NotImplementedError


class IVerificationApi(ABC):
    """The wire boundary to the external email verification service."""

    @abstractmethod
    async def lookup(self, target: str) -> Dict[str, Any]:
        """Queries the API for an email address or a bare domain.

        Returns:
            The decoded JSON object.

        Raises:
            TransientVerificationError: The API rate limited the call (HTTP 429).
            PermanentVerificationError: Any other failure, including bodies
                that are not a JSON object.
            ConfigurationError: The API key is not configured.
        """
        raise NotImplementedError
