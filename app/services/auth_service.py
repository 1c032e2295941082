# app/services/auth_service.py
# Registration, login, two-factor and current-user flows

import logging
import uuid
from datetime import datetime
from typing import Callable

from pymongo.errors import DuplicateKeyError

from app.exceptions import (
    InvalidPasswordError,
    InvalidTwoFactorCodeError,
    MissingIdentifierError,
    MissingTypeFieldError,
    TwoFactorNotEnabledError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from app.models.user import (
    AuthResponse,
    OrganizationData,
    PersonData,
    RegisterRequest,
    TwoFactorSetupResponse,
    UserRecord,
    UserResponse,
)
from app.services.two_factor_service import TwoFactorService
from app.services.user_repository import UserRepository
from app.utils import constants
from app.utils.auth import PasswordHasher, TokenService
from app.utils.constants import UserType
from app.utils.validators import has_identifier, looks_like_uuid

logger = logging.getLogger(__name__)


def build_user_response(users: UserRepository, user: UserRecord) -> UserResponse:
    """Base fields plus occupation or location from the subtype row."""
    response = UserResponse(
        user_id=user.id,
        user_type=user.user_type,
        user_firstname=user.user_firstname,
        user_lastname=user.user_lastname,
        email=user.email,
        contact=user.contact,
        user_logo=user.user_logo,
        domain=user.domain,
        description=user.description,
        registration_date_time=user.registration_date_time,
        certified=user.certified,
        two_fa_enabled=user.two_fa_enabled,
    )
    details = users.find_subtype(user)
    if isinstance(details, PersonData):
        response.occupation = details.occupation
    elif isinstance(details, OrganizationData):
        response.location = details.location
    else:
        logger.warning(f"No {user.user_type.value.lower()} row found for user {user.id}")
    return response


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        two_factor: TwoFactorService,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.two_factor = two_factor
        self.clock = clock

    # Registration

    def register(self, request: RegisterRequest) -> AuthResponse:
        """Create a user and its person/organization row, then log it in."""
        logger.info(
            f"Register attempt for email: {request.email}, contact: {request.contact}, type: {request.user_type.value}"
        )
        self._validate_identifiers(request)
        details = self._validate_type_specific_fields(request)
        self._check_user_does_not_exist(request)

        user = UserRecord(
            id=str(uuid.uuid4()),
            user_type=request.user_type,
            user_firstname=request.user_firstname,
            user_lastname=request.user_lastname,
            email=request.email,
            contact=request.contact,
            password=self.hasher.hash(request.password),
            user_logo=request.user_logo,
            domain=request.domain,
            description=request.description,
            certified=False,
            registration_date_time=self.clock(),
        )
        try:
            self.users.insert_with_subtype(user, details)
        except DuplicateKeyError:
            # Lost a race against a concurrent registration; the unique index caught it
            logger.warning("Registration rejected by unique index")
            raise UserAlreadyExistsError()

        logger.info(f"User registered successfully: {user.id}")
        return self._auth_response(user, constants.REGISTRATION_SUCCESS_MESSAGE)

    def _validate_identifiers(self, request: RegisterRequest) -> None:
        if not has_identifier(request.email, request.contact):
            raise MissingIdentifierError()

    def _validate_type_specific_fields(self, request: RegisterRequest):
        if request.user_type == UserType.PERSON:
            if not request.occupation or not request.occupation.strip():
                raise MissingTypeFieldError(UserType.PERSON)
            return PersonData(occupation=request.occupation)
        if not request.location or not request.location.strip():
            raise MissingTypeFieldError(UserType.ORGANIZATION)
        return OrganizationData(location=request.location)

    def _check_user_does_not_exist(self, request: RegisterRequest) -> None:
        email_exists = bool(request.email) and self.users.exists_by_email(request.email)
        contact_exists = bool(request.contact) and self.users.exists_by_contact(request.contact)
        if email_exists or contact_exists:
            raise UserAlreadyExistsError()

    # Login

    def login(self, identifier: str, password: str) -> AuthResponse:
        """Check the password; hand out a token unless a second factor is required."""
        logger.info(f"Login attempt for identifier: {identifier}")
        user = self.users.find_by_email_or_contact(identifier)
        if user is None:
            self.hasher.burn(password)
            raise UserNotFoundError()
        if not self.hasher.matches(password, user.password):
            logger.warning(f"Invalid password for user {user.id}")
            raise InvalidPasswordError()

        if user.two_fa_enabled:
            logger.info(f"Second factor required for user {user.id}")
            return AuthResponse(message=constants.TWO_FA_REQUIRED, two_factor_required=True)

        logger.info(f"Login successful for user {user.id}")
        return self._auth_response(user, constants.LOGIN_SUCCESS_MESSAGE)

    # Two-factor authentication

    def verify_two_factor(self, identifier: str, code: str) -> AuthResponse:
        """Second login step: a TOTP code or one unused backup code."""
        logger.info(f"2FA verification attempt for: {identifier}")
        user = self.users.find_by_email_or_contact(identifier)
        if user is None:
            raise UserNotFoundError()
        if not user.two_fa_enabled:
            raise TwoFactorNotEnabledError()

        if self.two_factor.verify_code(user.two_fa_secret, code):
            logger.info(f"2FA verification successful for user {user.id}")
            return self._auth_response(user, constants.LOGIN_SUCCESS_MESSAGE)

        if self.two_factor.verify_backup_code(user.two_fa_backup_codes, code):
            # The conditional $pull decides which of two concurrent uses wins
            if self.users.consume_backup_code(user.id, code.strip().upper()):
                user.two_fa_backup_codes = self.two_factor.remove_backup_code(user.two_fa_backup_codes, code)
                logger.info(
                    f"Backup code consumed for user {user.id}, {len(user.two_fa_backup_codes)} remaining"
                )
                return self._auth_response(user, constants.LOGIN_SUCCESS_MESSAGE)
            logger.warning(f"Backup code for user {user.id} was already consumed")

        logger.warning(f"Invalid 2FA code for user {user.id}")
        raise InvalidTwoFactorCodeError()

    def enable_two_factor(self, user_id: str) -> TwoFactorSetupResponse:
        logger.info(f"Enabling 2FA for user: {user_id}")
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()

        secret = self.two_factor.generate_secret()
        backup_codes = self.two_factor.generate_backup_codes()
        account_label = user.subject
        response = TwoFactorSetupResponse(
            secret=secret,
            qr_code_url=self.two_factor.generate_qr_payload(secret, account_label),
            provisioning_uri=self.two_factor.get_provisioning_uri(secret, account_label),
            backup_codes=backup_codes,
        )

        self.users.update_fields(
            user.id,
            {"two_fa_enabled": True, "two_fa_secret": secret, "two_fa_backup_codes": backup_codes},
        )
        logger.info(f"2FA enabled successfully for user {user_id}")
        return response

    def disable_two_factor(self, user_id: str) -> str:
        logger.info(f"Disabling 2FA for user: {user_id}")
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        self.users.update_fields(
            user.id,
            {"two_fa_enabled": False, "two_fa_secret": None, "two_fa_backup_codes": None},
        )
        logger.info(f"2FA disabled successfully for user {user_id}")
        return constants.TWO_FA_DISABLED_SUCCESS

    # Current user

    def get_current_user(self, identifier: str) -> UserResponse:
        """Look up by email or contact, falling back to the user id."""
        logger.info(f"Fetching current user information for: {identifier}")
        user = self.users.find_by_email_or_contact(identifier)
        if user is None and looks_like_uuid(identifier):
            user = self.users.find_by_id(identifier)
        if user is None:
            raise UserNotFoundError()
        return build_user_response(self.users, user)

    def logout(self) -> str:
        # Tokens are stateless: nothing to revoke server-side
        logger.info("User logout processed")
        return constants.LOGOUT_SUCCESS_MESSAGE

    def _auth_response(self, user: UserRecord, message: str) -> AuthResponse:
        return AuthResponse(
            message=message,
            user_response_dto=build_user_response(self.users, user),
            token=self.tokens.issue(user),
            expires_in=self.tokens.expires_in_seconds,
        )
