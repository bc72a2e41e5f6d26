"""
Unit tests for password validation and JWT helpers.
"""
import pytest
from datetime import timedelta

from campus_connect.core.security import (
    validate_password,
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
)


@pytest.mark.unit
class TestPasswordValidation:
    """Password strength rules."""

    def test_valid_password(self):
        validate_password("Test123!@#")

    @pytest.mark.parametrize(
        "password, message",
        [
            ("T1!a", "at least 8 characters"),
            ("test123!@#", "uppercase"),
            ("TEST123!@#", "lowercase"),
            ("TestTest!@#", "digit"),
            ("Test12345", "special character"),
        ],
    )
    def test_weak_passwords_rejected(self, password, message):
        with pytest.raises(ValueError) as exc:
            validate_password(password)
        assert message in str(exc.value)


@pytest.mark.unit
class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("Test123!@#")
        assert hashed != "Test123!@#"

    def test_verify_matches_only_original(self):
        hashed = hash_password("Test123!@#")
        assert verify_password("Test123!@#", hashed)
        assert not verify_password("Wrong123!@#", hashed)


@pytest.mark.unit
class TestAccessTokens:
    def test_round_trip_claims(self):
        token = create_access_token({"sub": "user-1", "role": "student"})
        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "student"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))
        with pytest.raises(ValueError, match="expired"):
            decode_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(ValueError, match="Invalid token"):
            decode_token("not-a-jwt")

    def test_token_without_subject_rejected(self):
        token = create_access_token({"role": "admin"})
        with pytest.raises(ValueError, match="sub"):
            decode_token(token)
