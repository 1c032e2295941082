# app/routes/users.py
# User listing and profile update routes

import logging
from typing import List
from fastapi import APIRouter, HTTPException, status, Depends
from app.dependencies import get_current_user_id, get_profile_service
from app.exceptions import ForbiddenActionError
from app.models.user import AuthResponse, UpdateProfileRequest, UserResponse
from app.services.profile_service import ProfileService
from app.utils.constants import UserType

logger = logging.getLogger(__name__)

router = APIRouter()


def _list(profiles: ProfileService, user_type=None) -> List[UserResponse]:
    try:
        return profiles.list_users(user_type)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing users: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch users"
        )


@router.get("", response_model=List[UserResponse])
def list_users(
    user_id: str = Depends(get_current_user_id),
    profiles: ProfileService = Depends(get_profile_service),
):
    """All users with their person/organization fields."""
    logger.info(f"Received GET /users from {user_id}")
    return _list(profiles)


@router.get("/persons", response_model=List[UserResponse])
def list_persons(
    user_id: str = Depends(get_current_user_id),
    profiles: ProfileService = Depends(get_profile_service),
):
    logger.info(f"Received GET /users/persons from {user_id}")
    return _list(profiles, UserType.PERSON)


@router.get("/organizations", response_model=List[UserResponse])
def list_organizations(
    user_id: str = Depends(get_current_user_id),
    profiles: ProfileService = Depends(get_profile_service),
):
    logger.info(f"Received GET /users/organizations from {user_id}")
    return _list(profiles, UserType.ORGANIZATION)


@router.put("/{user_id}/profile", response_model=AuthResponse)
def update_profile(
    user_id: str,
    request: UpdateProfileRequest,
    current_user_id: str = Depends(get_current_user_id),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Update the caller's own profile."""
    if current_user_id != user_id:
        logger.warning(f"User {current_user_id} tried to update profile of {user_id}")
        raise ForbiddenActionError()
    try:
        return profiles.update_profile(user_id, request)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating profile: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile"
        )
