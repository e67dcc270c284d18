import os

os.environ.setdefault("APP_ENV", "test")

from typing import Any, Dict, List, Sequence

import pytest

from recovery_guard.domain.interfaces import IBlacklistOracle, IUserAttributeStore, IVerificationApi


class FakeClock:
    """Manually advanced clock for window stores."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records delays and advances a fake clock."""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


class InMemoryUserStore(IUserAttributeStore):
    """Dictionary-backed attribute store mirroring the SQL repository semantics."""

    def __init__(self):
        self.values: Dict[tuple, str] = {}
        self.lookups: List[tuple] = []

    async def get_attribute(self, user_id: str, app_id: str, key: str) -> str:
        return self.values.get((user_id, app_id, key), "")

    async def set_attribute(self, user_id: str, app_id: str, key: str, value: str) -> None:
        self.values[(user_id, app_id, key)] = value

    async def delete_attribute(self, user_id: str, app_id: str, key: str) -> None:
        self.values.pop((user_id, app_id, key), None)

    async def find_users_by_attribute(
        self, app_id: str, key: str, value: str, case_insensitive: bool = True
    ) -> List[str]:
        self.lookups.append(("exact", key, value))
        matches = []
        for (user_id, stored_app, stored_key), stored in self.values.items():
            if stored_app != app_id or stored_key != key or not stored:
                continue
            if (stored.lower() == value.lower()) if case_insensitive else (stored == value):
                matches.append(user_id)
        return sorted(set(matches))

    async def find_users_by_attribute_affixes(
        self, app_id: str, key: str, prefix: str, suffix: str
    ) -> List[str]:
        self.lookups.append(("affixes", key, prefix, suffix))
        prefix, suffix = prefix.lower(), suffix.lower()
        matches = []
        for (user_id, stored_app, stored_key), stored in self.values.items():
            value = stored.lower()
            if (
                stored_app == app_id
                and stored_key == key
                and len(value) >= len(prefix) + len(suffix)
                and value.startswith(prefix)
                and value.endswith(suffix)
            ):
                matches.append(user_id)
        return sorted(set(matches))


class StaticBlacklist(IBlacklistOracle):
    def __init__(self, popular: Sequence[str] = (), blacklisted: Sequence[str] = ()):
        self.popular = set(popular)
        self.blacklisted = set(blacklisted)
        self.added: List[tuple] = []

    async def is_custom_blacklisted(self, domain: str) -> bool:
        return domain in self.blacklisted

    async def is_popular_domain(self, domain: str) -> bool:
        return domain in self.popular

    async def add_disposable_domain(self, domain: str, related_domains: Sequence[str] = ()) -> None:
        self.added.append((domain, tuple(related_domains)))
        self.blacklisted.add(domain)


class ScriptedVerificationApi(IVerificationApi):
    """Answers lookups from a per-target script.

    A script entry is either a single response or a list consumed one item
    per call; exceptions are raised instead of returned.
    """

    def __init__(self, responses: Dict[str, Any] | None = None, default: Any = None):
        self.responses = dict(responses or {})
        self.default = default if default is not None else {"disposable": False, "mx": True, "deliverable_email": True}
        self.calls: List[str] = []

    async def lookup(self, target: str) -> Dict[str, Any]:
        self.calls.append(target)
        response = self.responses.get(target, self.default)
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorded_sleep(fake_clock) -> RecordingSleep:
    return RecordingSleep(fake_clock)


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def blacklist() -> StaticBlacklist:
    return StaticBlacklist(popular=["knownprovider.com", "gmail.com"], blacklisted=["spam.example"])


@pytest.fixture
def verification_api() -> ScriptedVerificationApi:
    return ScriptedVerificationApi()


@pytest.fixture
def make_verification_api():
    return ScriptedVerificationApi
