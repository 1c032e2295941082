# app/utils/constants.py
# Defines the user discriminator and the fixed messages returned by the auth core

from enum import Enum


class UserType(str, Enum):
    """Enum for the user discriminator."""
    PERSON = "PERSON"
    ORGANIZATION = "ORGANIZATION"


# Validation
MIN_PASSWORD_LENGTH = 8
EMAIL_OR_CONTACT_REQUIRED_MESSAGE = "Either email or contact must be provided"
OCCUPATION_REQUIRED_FOR_PERSON_MESSAGE = "Occupation is required for person type"
LOCATION_REQUIRED_FOR_ORGANIZATION_MESSAGE = "Location is required for organization type"
INVALID_CONTACT_MESSAGE = "Invalid contact number format"
EMAIL_VALID_MESSAGE = "Email must be valid"

# Registration / login
REGISTRATION_SUCCESS_MESSAGE = "Registration successful"
LOGIN_SUCCESS_MESSAGE = "Login successful"
LOGOUT_SUCCESS_MESSAGE = "Logout successful. Please discard your authentication token."
USER_NOT_FOUND_MESSAGE = "User not found"
INVALID_PASSWORD_MESSAGE = "Invalid password"
USER_ALREADY_EXISTS_MESSAGE = "User with this email or contact already exists"

# Password reset
PASSWORD_RESET_EMAIL_SENT = "Password reset email sent successfully"
PASSWORD_RESET_SUCCESS = "Password reset successful"
INVALID_OR_EXPIRED_TOKEN = "Invalid or expired token"
PASSWORD_RESET_TOKEN_ALREADY_USED = "This reset token has already been used"

# Two-factor authentication
TWO_FA_DISABLED_SUCCESS = "Two-factor authentication disabled successfully"
INVALID_TWO_FA_CODE = "Invalid 2FA code"
TWO_FA_REQUIRED = "Two-factor authentication required"
TWO_FA_NOT_ENABLED = "Two-factor authentication is not enabled"

# Bearer tokens
MISSING_TOKEN_MESSAGE = "Authorization token is missing"
MALFORMED_TOKEN_MESSAGE = "Malformed authentication token"
INVALID_TOKEN_SIGNATURE_MESSAGE = "Invalid authentication token"
EXPIRED_TOKEN_MESSAGE = "Authentication token has expired"

# Profile
PROFILE_UPDATE_SUCCESS_MESSAGE = "Profile updated successfully"
EMAIL_ALREADY_USED_MESSAGE = "Email is already used by another user"
CONTACT_ALREADY_USED_MESSAGE = "Contact is already used by another user"
CANNOT_REMOVE_BOTH_EMAIL_AND_CONTACT_MESSAGE = "Cannot remove both email and contact"
PERSON_DATA_NOT_FOUND_MESSAGE = "Person data not found for this user"
ORGANIZATION_DATA_NOT_FOUND_MESSAGE = "Organization data not found for this user"
FORBIDDEN_PROFILE_UPDATE_MESSAGE = "You are not authorized to update this profile"

# Two-factor engine parameters
TOTP_DIGITS = 6
TOTP_PERIOD_SECONDS = 30
TOTP_SECRET_BYTES = 20
BACKUP_CODES_COUNT = 8
BACKUP_CODE_LENGTH = 8
# No 0/O or 1/I so codes survive being read aloud or retyped
BACKUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
