"""Unit tests for PasswordHashingService."""

import pytest

from lemon_auth.exceptions import WeakPasswordError
from lemon_auth.services import PasswordHashingService


class TestPasswordHashingService:
    """Tests for password hashing and verification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = PasswordHashingService(rounds=4)  # Low rounds for fast tests

    def test_hash_returns_bcrypt_format(self):
        """Test that hash returns a valid bcrypt hash."""
        hashed = self.service.hash("secure_password123")

        # bcrypt hashes start with $2b$ or $2a$
        assert hashed.startswith("$2")
        assert len(hashed) >= 50

    def test_verify_correct_password(self):
        password = "my_secret_password"
        hashed = self.service.hash(password)

        assert self.service.verify(password, hashed) is True

    def test_verify_incorrect_password(self):
        hashed = self.service.hash("my_secret_password")

        assert self.service.verify("wrong_password", hashed) is False

    def test_verify_invalid_hash_returns_false(self):
        """Malformed hashes never raise."""
        assert self.service.verify("password", "not_a_valid_hash") is False
        assert self.service.verify("password", "") is False

    def test_hash_produces_different_hashes(self):
        """Test that hashing same password twice produces different hashes."""
        password = "same_password"
        hash1 = self.service.hash(password)
        hash2 = self.service.hash(password)

        assert hash1 != hash2
        assert self.service.verify(password, hash1)
        assert self.service.verify(password, hash2)

    def test_long_passwords_are_accepted(self):
        """Passwords beyond bcrypt's 72 bytes still hash and verify."""
        password = "x" * 100
        hashed = self.service.hash(password)

        assert self.service.verify(password, hashed) is True

    def test_dummy_verify_returns_nothing_and_does_not_raise(self):
        assert self.service.dummy_verify("whatever-password") is None
        assert self.service.dummy_verify("") is None


class TestPasswordValidation:
    """Tests for password strength validation."""

    def setup_method(self):
        self.service = PasswordHashingService(rounds=4)

    def test_validate_empty_password_raises(self):
        with pytest.raises(WeakPasswordError, match="cannot be empty"):
            self.service.validate_strength("")

    def test_validate_short_password_raises(self):
        with pytest.raises(WeakPasswordError, match="at least 8 characters"):
            self.service.validate_strength("short")

    def test_validate_too_long_password_raises(self):
        with pytest.raises(WeakPasswordError, match="cannot exceed 128"):
            self.service.validate_strength("a" * 129)

    def test_validate_boundaries_pass(self):
        self.service.validate_strength("a" * 8)
        self.service.validate_strength("a" * 128)

    def test_hash_validates_strength(self):
        with pytest.raises(WeakPasswordError):
            self.service.hash("short")


class TestNeedsRehash:
    def test_same_rounds_needs_no_rehash(self):
        service = PasswordHashingService(rounds=4)
        assert service.needs_rehash(service.hash("password123")) is False

    def test_different_rounds_need_rehash(self):
        old = PasswordHashingService(rounds=4)
        new = PasswordHashingService(rounds=5)
        assert new.needs_rehash(old.hash("password123")) is True

    def test_garbage_needs_rehash(self):
        assert PasswordHashingService(rounds=4).needs_rehash("garbage") is True
