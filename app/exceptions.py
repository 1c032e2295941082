# app/exceptions.py
# Error taxonomy for the auth core. Each error carries a fixed message so clients can branch on it.

from fastapi import HTTPException, status

from app.utils import constants


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class IllegalUserTypeError(RuntimeError):
    """Raised when a stored discriminator is neither PERSON nor ORGANIZATION."""

    def __init__(self, user_type):
        self.user_type = user_type
        super().__init__(f"Unknown user type: {user_type}")


# Validation


class MissingIdentifierError(ValidationError):
    def __init__(self):
        super().__init__(constants.EMAIL_OR_CONTACT_REQUIRED_MESSAGE)


class MissingTypeFieldError(ValidationError):
    def __init__(self, user_type):
        if user_type == constants.UserType.ORGANIZATION:
            detail = constants.LOCATION_REQUIRED_FOR_ORGANIZATION_MESSAGE
        else:
            detail = constants.OCCUPATION_REQUIRED_FOR_PERSON_MESSAGE
        self.user_type = user_type
        super().__init__(detail)


class TwoFactorNotEnabledError(ValidationError):
    def __init__(self):
        super().__init__(constants.TWO_FA_NOT_ENABLED)


class CannotRemoveIdentifiersError(ValidationError):
    def __init__(self):
        super().__init__(constants.CANNOT_REMOVE_BOTH_EMAIL_AND_CONTACT_MESSAGE)


class InvalidOrExpiredTokenError(ValidationError):
    def __init__(self):
        super().__init__(constants.INVALID_OR_EXPIRED_TOKEN)


class TokenAlreadyUsedError(ValidationError):
    def __init__(self):
        super().__init__(constants.PASSWORD_RESET_TOKEN_ALREADY_USED)


class MalformedTokenError(ValidationError):
    def __init__(self):
        super().__init__(constants.MALFORMED_TOKEN_MESSAGE)


# Conflicts


class UserAlreadyExistsError(ConflictError):
    def __init__(self):
        super().__init__(constants.USER_ALREADY_EXISTS_MESSAGE)


class EmailAlreadyUsedError(ConflictError):
    def __init__(self):
        super().__init__(constants.EMAIL_ALREADY_USED_MESSAGE)


class ContactAlreadyUsedError(ConflictError):
    def __init__(self):
        super().__init__(constants.CONTACT_ALREADY_USED_MESSAGE)


# Not found


class UserNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__(constants.USER_NOT_FOUND_MESSAGE)


# Authentication


class InvalidPasswordError(AuthenticationError):
    def __init__(self):
        super().__init__(constants.INVALID_PASSWORD_MESSAGE)


class InvalidTwoFactorCodeError(AuthenticationError):
    def __init__(self):
        super().__init__(constants.INVALID_TWO_FA_CODE)


class MissingTokenError(AuthenticationError):
    def __init__(self):
        super().__init__(constants.MISSING_TOKEN_MESSAGE)


class InvalidSignatureError(AuthenticationError):
    def __init__(self):
        super().__init__(constants.INVALID_TOKEN_SIGNATURE_MESSAGE)


class TokenExpiredError(AuthenticationError):
    def __init__(self):
        super().__init__(constants.EXPIRED_TOKEN_MESSAGE)


# Authorization


class ForbiddenActionError(AuthorizationError):
    def __init__(self, detail: str = constants.FORBIDDEN_PROFILE_UPDATE_MESSAGE):
        super().__init__(detail)
