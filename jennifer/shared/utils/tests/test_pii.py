"""Tests for identifier hashing."""
import pytest

from jennifer.shared.utils import pii
from jennifer.shared.utils.pii import configure_pii_salt, hash_pii, hash_text_for_audit


@pytest.fixture(autouse=True)
def reset_salt():
    """Leave the module-level salt as we found it."""
    original = pii._PII_SALT
    yield
    pii._PII_SALT = original


class TestConfigurePiiSalt:

    def test_short_salt_rejected(self):
        with pytest.raises(ValueError):
            configure_pii_salt("too_short")

    def test_empty_salt_rejected(self):
        with pytest.raises(ValueError):
            configure_pii_salt("")


class TestHashPii:

    def test_unconfigured_salt_raises(self):
        pii._PII_SALT = None
        with pytest.raises(RuntimeError):
            hash_pii("session-123")

    def test_hash_is_stable_and_hex(self):
        configure_pii_salt("test_salt_that_is_at_least_32_characters_long")
        first = hash_pii("session-123")
        assert first == hash_pii("session-123")
        assert len(first) == 64
        assert all(c in "0123456789abcdef" for c in first)

    def test_different_sessions_hash_differently(self):
        configure_pii_salt("test_salt_that_is_at_least_32_characters_long")
        assert hash_pii("session-a") != hash_pii("session-A")

    def test_salt_changes_hash(self):
        configure_pii_salt("test_salt_that_is_at_least_32_characters_long")
        first = hash_pii("session-123")
        configure_pii_salt("another_salt_that_is_also_32_characters_long")
        assert hash_pii("session-123") != first


def test_hash_text_for_audit_does_not_contain_text():
    digest = hash_text_for_audit("I want to talk")
    assert "talk" not in digest
    assert len(digest) == 64
