"""Password Hashing — bcrypt digests, verification and the admin password policy."""

import pytest

from epetitions.core.errors import RecordValidationError
from epetitions.core.passwords import (
    hash_password, password_policy_errors, verify_password,
)


def test_hash_is_bcrypt_and_verifies():
    digest = hash_password("Letmein1")
    assert digest.startswith("$2b$10$")
    assert verify_password("Letmein1", digest) is True
    assert verify_password("letmein1", digest) is False


def test_verify_without_digest_or_password_is_false():
    assert verify_password("Letmein1", None) is False
    assert verify_password(None, hash_password("Letmein1")) is False
    assert verify_password("", hash_password("Letmein1")) is False


def test_verify_with_malformed_digest_is_false():
    assert verify_password("Letmein1", "not-a-bcrypt-digest") is False


def test_password_policy_accepts_strong_password():
    assert password_policy_errors("Letmein1") == []


def test_password_policy_lists_each_failed_rule():
    errors = password_policy_errors("short")
    assert "must be at least 8 characters" in errors
    assert "must contain an upper-case letter" in errors
    assert "must contain a digit" in errors
    assert "must contain a lower-case letter" not in errors


def test_hash_refuses_secrets_past_72_bytes():
    with pytest.raises(RecordValidationError) as exc:
        hash_password("é" * 37)
    assert exc.value.errors == {"password": ["is too long (maximum is 72 bytes)"]}


def test_72_byte_secret_still_hashes():
    assert verify_password("x" * 72, hash_password("x" * 72)) is True


def test_verify_past_72_bytes_is_false():
    assert verify_password("x" * 80, hash_password("x" * 72)) is False


def test_password_policy_counts_bytes_not_characters():
    assert password_policy_errors("Aa1" + "é" * 60) == [
        "is too long (maximum is 72 bytes)",
    ]
