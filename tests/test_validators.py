# tests/test_validators.py
# Unit tests for validator functions

from app.utils.validators import (
    has_identifier,
    looks_like_uuid,
    validate_email,
    validate_phone,
    validate_totp_code,
)


def test_validate_email():
    """Test email validation."""
    assert validate_email(None) == True
    assert validate_email("test@example.com") == True
    assert validate_email("invalid") == False


def test_validate_phone():
    """Test phone number validation."""
    assert validate_phone(None) == True
    assert validate_phone("+237690000000") == True
    assert validate_phone("690000000") == True
    assert validate_phone("123") == False
    assert validate_phone("+0123456789") == False


def test_has_identifier():
    assert has_identifier("a@example.com", None) == True
    assert has_identifier(None, "+237690000000") == True
    assert has_identifier("", "   ") == False
    assert has_identifier(None, None) == False


def test_validate_totp_code():
    assert validate_totp_code("123456") == True
    assert validate_totp_code("12345") == False
    assert validate_totp_code("1234567") == False
    assert validate_totp_code("12a456") == False
    assert validate_totp_code(None) == False


def test_looks_like_uuid():
    assert looks_like_uuid("3f2b8c1e-9d4a-4b7e-8f00-1a2b3c4d5e6f") == True
    assert looks_like_uuid("alice@example.com") == False
    assert looks_like_uuid(None) == False
