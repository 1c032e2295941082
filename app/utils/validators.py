# app/utils/validators.py
# Validation functions for identifiers and two-factor input

import re
from typing import Optional

from app.utils.constants import TOTP_DIGITS


def validate_email(email: Optional[str]) -> bool:
    """Validate email format if provided."""
    if not email:
        return True
    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    return bool(re.match(pattern, email))


def validate_phone(phone: Optional[str]) -> bool:
    """Validate phone number format if provided."""
    if not phone:
        return True
    # Phone should be 7-15 digits, optionally starting with +
    # First digit (after +) should be 1-9, followed by 6-14 more digits
    pattern = r"^\+?[1-9]\d{6,14}$"
    return bool(re.match(pattern, phone))


def has_identifier(email: Optional[str], contact: Optional[str]) -> bool:
    """True when at least one of email/contact is a non-blank string."""
    return bool(email and email.strip()) or bool(contact and contact.strip())


def validate_totp_code(code: Optional[str]) -> bool:
    """A TOTP code is exactly TOTP_DIGITS ASCII digits."""
    if not code:
        return False
    return bool(re.fullmatch(r"\d{%d}" % TOTP_DIGITS, code))


def looks_like_uuid(value: Optional[str]) -> bool:
    """Validate canonical UUID text (used for id fallbacks)."""
    if not value:
        return False
    pattern = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
    return bool(re.match(pattern, value))


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Canonical stored form of an email: trimmed and lowercased."""
    if email is None:
        return None
    return email.strip().lower() or None
