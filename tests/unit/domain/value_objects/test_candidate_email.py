import pytest

from recovery_guard.domain.value_objects import (
    AliasParts,
    CandidateEmail,
    UserContext,
    mask_email,
    split_alias,
)


def test_candidate_is_lower_cased_but_keeps_raw_value():
    candidate = CandidateEmail("Alice@Example.COM")
    assert candidate.value == "alice@example.com"
    assert candidate.raw == "Alice@Example.COM"
    assert str(candidate) == "alice@example.com"


@pytest.mark.parametrize(
    "email", [" alice@example.com", "alice@example.com ", "alice@example.com\t", "alice@example.com\n"]
)
def test_surrounding_whitespace_is_invalid_format(email):
    candidate = CandidateEmail(email)
    assert not candidate.is_empty
    assert not candidate.is_valid_format


def test_empty_candidate():
    assert CandidateEmail("").is_empty
    assert not CandidateEmail("   ").is_empty
    assert not CandidateEmail("a@b.co").is_empty


@pytest.mark.parametrize(
    "email",
    [
        "alice@example.com",
        "first.last@sub.example.org",
        "user+tag@domain.com",
        "bob@disposable-mail.test",
    ],
)
def test_valid_formats(email):
    assert CandidateEmail(email).is_valid_format


@pytest.mark.parametrize(
    "email",
    [
        "plainaddress",
        "@example.com",
        "alice@",
        "alice@@example.com",
        "alice@example",
        "a@b.c",
        "alice..bob@example.com",
        "alice@-example.com",
        f"{'a' * 65}@example.com",
        f"alice@{'a' * 250}.com",
    ],
)
def test_invalid_formats(email):
    assert not CandidateEmail(email).is_valid_format


def test_domain_and_local_part():
    candidate = CandidateEmail("User+News@Domain.com")
    assert candidate.local_part == "user+news"
    assert candidate.domain == "domain.com"
    assert candidate.is_alias


def test_non_string_is_rejected():
    with pytest.raises(TypeError):
        CandidateEmail(None)


def test_split_alias_uses_first_plus():
    parts = split_alias("User+a+b@Domain.com")
    assert parts == AliasParts(base="user", tag="a+b", domain="domain.com")
    assert parts.is_alias


def test_split_alias_without_tag():
    parts = split_alias("user@domain.com")
    assert parts.tag is None
    assert not parts.is_alias


def test_same_mailbox_ignores_tag():
    assert split_alias("user+1@domain.com").same_mailbox(split_alias("user+2@domain.com"))
    assert not split_alias("user+1@domain.com").same_mailbox(split_alias("other+1@domain.com"))
    assert not split_alias("user+1@domain.com").same_mailbox(None)


def test_mask_email():
    assert mask_email("user@example.com") == "us**@e*********m"
    assert mask_email("not-an-email") == "***"
    assert CandidateEmail("User@Example.com").mask_for_logging() == "us**@e*********m"


def test_user_context_owns_recovery_email():
    context = UserContext(
        user_id="1",
        current_recovery_email="a@x.com",
        current_unverified_recovery_email="b@x.com",
    )
    assert context.owns_recovery_email("a@x.com")
    assert context.owns_recovery_email("b@x.com")
    assert not context.owns_recovery_email("A@x.com")
    assert not context.owns_recovery_email("c@x.com")


def test_user_context_alias_parts():
    context = UserContext(user_id="1", current_unverified_recovery_email="user+1@domain.com")
    verified, unverified = context.recovery_alias_parts
    assert verified is None
    assert unverified == AliasParts(base="user", tag="1", domain="domain.com")
