"""A Value Object representing a submitted recovery email address.

Unlike a registration email, a candidate is not rejected at construction
time: the rule engine needs to report *why* an address is unacceptable, so
`CandidateEmail` only normalizes and decomposes the string and exposes the
format check as a predicate.
"""

import re
from dataclasses import dataclass, field
from typing import ClassVar, Optional

ALIAS_SEPARATOR = "+"


@dataclass(frozen=True, slots=True)
class AliasParts:
    """The `{aliasBase, aliasTag, domain}` decomposition of an address.

    ``tag`` is ``None`` when the local part has no ``+`` separator.
    """

    base: str
    tag: Optional[str]
    domain: str

    @property
    def is_alias(self) -> bool:
        return self.tag is not None

    def same_mailbox(self, other: Optional["AliasParts"]) -> bool:
        """True when both addresses share base and domain, whatever the tag."""
        return other is not None and self.base == other.base and self.domain == other.domain


@dataclass(frozen=True, slots=True)
class CandidateEmail:
    """An immutable, normalized candidate recovery email.

    Attributes:
        raw: The string exactly as submitted, used for the comparison with the
            stored account email.
        value: The lower-cased address used for every other rule. Surrounding
            whitespace is kept, so padded input fails the format check.
    """

    raw: str
    value: str = field(init=False)

    MAX_LENGTH: ClassVar[int] = 254
    MIN_LENGTH: ClassVar[int] = 5
    EMAIL_PATTERN: ClassVar[re.Pattern] = re.compile(
        r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
        r"@(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$"
    )

    def __post_init__(self):
        if not isinstance(self.raw, str):
            raise TypeError("Email value must be a string.")
        object.__setattr__(self, "value", self.raw.lower())

    @property
    def is_empty(self) -> bool:
        return self.value == ""

    @property
    def is_valid_format(self) -> bool:
        """Checks length and syntax of the normalized address."""
        if not (self.MIN_LENGTH <= len(self.value) <= self.MAX_LENGTH):
            return False
        local, _, _ = self.value.rpartition("@")
        if len(local) > 64:
            return False
        return self.EMAIL_PATTERN.fullmatch(self.value) is not None

    @property
    def local_part(self) -> str:
        """Returns the local part of the email address (before the last '@')."""
        return self.value.rpartition("@")[0]

    @property
    def domain(self) -> str:
        """Returns the domain part of the email address."""
        return self.value.rpartition("@")[2]

    @property
    def alias_parts(self) -> AliasParts:
        return split_alias(self.value)

    @property
    def is_alias(self) -> bool:
        return ALIAS_SEPARATOR in self.local_part

    def mask_for_logging(self) -> str:
        """Returns a masked version of the email for safe logging.

        Example: 'us**@e*****.com'
        """
        return mask_email(self.value)

    def __str__(self) -> str:
        return self.value


def split_alias(email: str) -> AliasParts:
    """Decomposes ``base+tag@domain`` (case-insensitively).

    The base is the text before the *first* ``+``; everything after it up to
    the ``@`` is the tag.
    """
    local, _, domain = email.strip().lower().rpartition("@")
    base, separator, tag = local.partition(ALIAS_SEPARATOR)
    return AliasParts(base=base, tag=tag if separator else None, domain=domain)


def mask_email(email: str) -> str:
    if "@" not in email:
        return "***"
    local, _, domain_part = email.rpartition("@")
    masked_local = f"{local[:2]}{'*' * max(len(local) - 2, 0)}"
    masked_domain = f"{domain_part[:1]}{'*' * max(len(domain_part) - 2, 0)}{domain_part[-1:]}"
    return f"{masked_local}@{masked_domain}"
