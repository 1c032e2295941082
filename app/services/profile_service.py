# app/services/profile_service.py
# Profile updates and user listings built on the credential store

import logging
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from app.exceptions import (
    CannotRemoveIdentifiersError,
    ContactAlreadyUsedError,
    EmailAlreadyUsedError,
    NotFoundError,
    UserNotFoundError,
)
from app.models.user import (
    AuthResponse,
    OrganizationData,
    PersonData,
    UpdateProfileRequest,
    UserResponse,
)
from app.services.auth_service import build_user_response
from app.services.user_repository import UserRepository
from app.utils import constants
from app.utils.auth import PasswordHasher
from app.utils.constants import UserType
from app.utils.validators import has_identifier

logger = logging.getLogger(__name__)


def _cleared(value: Optional[str]) -> Optional[str]:
    """Empty string means remove the identifier."""
    if value is None:
        return None
    return value.strip() or None


class ProfileService:
    def __init__(self, users: UserRepository, hasher: PasswordHasher):
        self.users = users
        self.hasher = hasher

    def update_profile(self, user_id: str, request: UpdateProfileRequest) -> AuthResponse:
        """Apply the fields present in the request; email and contact may be cleared but not both."""
        logger.info(f"Profile update requested for user: {user_id}")
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()

        email = user.email
        if request.email is not None:
            new_email = _cleared(request.email)
            if new_email and new_email != user.email and self.users.exists_by_email(new_email):
                raise EmailAlreadyUsedError()
            email = new_email

        contact = user.contact
        if request.contact is not None:
            new_contact = _cleared(request.contact)
            if new_contact and new_contact != user.contact and self.users.exists_by_contact(new_contact):
                raise ContactAlreadyUsedError()
            contact = new_contact

        if not has_identifier(email, contact):
            raise CannotRemoveIdentifiersError()

        user.email = email
        user.contact = contact
        for field in ("user_firstname", "user_lastname", "user_logo", "domain", "description"):
            value = getattr(request, field)
            if value is not None:
                setattr(user, field, value)
        if request.password:
            user.password = self.hasher.hash(request.password)

        details = self.users.find_subtype(user)
        if details is None:
            if user.user_type == UserType.PERSON:
                raise NotFoundError(constants.PERSON_DATA_NOT_FOUND_MESSAGE)
            raise NotFoundError(constants.ORGANIZATION_DATA_NOT_FOUND_MESSAGE)

        try:
            self.users.save(user)
        except DuplicateKeyError as e:
            logger.warning(f"Profile update for user {user_id} rejected by unique index")
            if "contact" in str(e):
                raise ContactAlreadyUsedError()
            raise EmailAlreadyUsedError()

        if isinstance(details, PersonData) and request.occupation and request.occupation.strip():
            self.users.save_subtype(user, PersonData(occupation=request.occupation.strip()))
        elif isinstance(details, OrganizationData) and request.location and request.location.strip():
            self.users.save_subtype(user, OrganizationData(location=request.location.strip()))

        logger.info(f"Profile updated successfully for user {user_id}")
        return AuthResponse(
            message=constants.PROFILE_UPDATE_SUCCESS_MESSAGE,
            user_response_dto=build_user_response(self.users, user),
        )

    def list_users(self, user_type: Optional[UserType] = None) -> List[UserResponse]:
        if user_type is None:
            records = self.users.find_all()
        else:
            records = self.users.find_all_by_type(user_type)
        logger.info(f"Found {len(records)} users")
        return [build_user_response(self.users, user) for user in records]
