# app/models/user.py
# User records and request/response models for authentication

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.utils.constants import (
    EMAIL_VALID_MESSAGE,
    INVALID_CONTACT_MESSAGE,
    MIN_PASSWORD_LENGTH,
    UserType,
)
from app.utils.validators import normalize_email, validate_email, validate_phone


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value


def _check_contact(value: Optional[str]) -> Optional[str]:
    if value is not None and not validate_phone(value):
        raise ValueError(INVALID_CONTACT_MESSAGE)
    return value


# Stored records


class PersonData(BaseModel):
    occupation: str


class OrganizationData(BaseModel):
    location: str


UserDetails = Union[PersonData, OrganizationData]


class UserRecord(BaseModel):
    """Base identity as persisted in the users collection."""

    id: str
    user_type: UserType
    user_firstname: Optional[str] = None
    user_lastname: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    password: str
    user_logo: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    certified: bool = False
    registration_date_time: datetime
    two_fa_enabled: bool = False
    two_fa_secret: Optional[str] = None
    two_fa_backup_codes: Optional[List[str]] = None

    @property
    def subject(self) -> str:
        """Email if present, else contact."""
        return self.email or self.contact


class PasswordResetTokenRecord(BaseModel):
    id: str
    token: str
    user_id: str
    expires_at: datetime
    used: bool = False
    created_at: datetime
    used_at: Optional[datetime] = None


# Requests


class RegisterRequest(BaseModel):
    user_type: UserType
    user_firstname: Optional[str] = None
    user_lastname: str
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    contact: Optional[str] = None
    user_logo: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    occupation: Optional[str] = None
    location: Optional[str] = None

    @field_validator("email", "contact", "occupation", "location", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return normalize_email(v)

    @field_validator("contact")
    @classmethod
    def contact_format(cls, v):
        return _check_contact(v)


class LoginRequest(BaseModel):
    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TwoFactorVerifyRequest(BaseModel):
    identifier: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    # Email or contact of the account
    email: str = Field(..., min_length=1)


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class UpdateProfileRequest(BaseModel):
    """Partial update: only provided fields change. An empty string clears email or contact."""

    user_firstname: Optional[str] = None
    user_lastname: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    user_logo: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)
    occupation: Optional[str] = None
    location: Optional[str] = None

    @field_validator("email")
    @classmethod
    def email_format(cls, v):
        if v is None or not v.strip():
            return v
        if not validate_email(v.strip()):
            raise ValueError(EMAIL_VALID_MESSAGE)
        return normalize_email(v)

    @field_validator("contact")
    @classmethod
    def contact_format(cls, v):
        if v is None or not v.strip():
            return v
        return _check_contact(v.strip())


# Responses


class UserResponse(BaseModel):
    user_id: str
    user_type: UserType
    user_firstname: Optional[str] = None
    user_lastname: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    user_logo: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    registration_date_time: datetime
    certified: bool = False
    two_fa_enabled: bool = False
    occupation: Optional[str] = None
    location: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    user_response_dto: Optional[UserResponse] = None
    token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    two_factor_required: bool = False


class TwoFactorSetupResponse(BaseModel):
    secret: str
    qr_code_url: str
    provisioning_uri: str
    backup_codes: List[str]


class MessageResponse(BaseModel):
    message: str
