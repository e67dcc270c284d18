"""Settings-backed implementation of the blacklist oracle.

Popular and blacklisted domains come from configuration. Disposable domains
discovered by the verification API are remembered for the lifetime of the
process, so repeated submissions from the same provider are rejected locally
without spending API quota.
"""

from typing import Iterable, Sequence, Set

import structlog

from recovery_guard.domain.interfaces import IBlacklistOracle

logger = structlog.get_logger(__name__)


def _normalize(domain: str) -> str:
    return domain.strip().lower()


class ConfiguredBlacklistOracle(IBlacklistOracle):
    """`IBlacklistOracle` over static domain lists plus learned disposables."""

    def __init__(self, popular_domains: Iterable[str] = (), blacklisted_domains: Iterable[str] = ()):
        self._popular: Set[str] = {_normalize(d) for d in popular_domains if d}
        self._blacklisted: Set[str] = {_normalize(d) for d in blacklisted_domains if d}

    async def is_custom_blacklisted(self, domain: str) -> bool:
        return _normalize(domain) in self._blacklisted

    async def is_popular_domain(self, domain: str) -> bool:
        return _normalize(domain) in self._popular

    async def add_disposable_domain(self, domain: str, related_domains: Sequence[str] = ()) -> None:
        new_domains = {_normalize(d) for d in (domain, *related_domains) if d} - self._blacklisted
        # A popular provider must never be blacklisted by API enrichment.
        new_domains -= self._popular
        if not new_domains:
            return
        self._blacklisted |= new_domains
        logger.info(
            "disposable_domains_recorded",
            domain=_normalize(domain),
            added=sorted(new_domains),
            total=len(self._blacklisted),
        )
