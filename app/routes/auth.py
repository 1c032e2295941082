# app/routes/auth.py
# Authentication routes for registration, password login, two-factor and password reset

import logging
from fastapi import APIRouter, HTTPException, status, Depends
from app.dependencies import (
    get_auth_service,
    get_current_user_id,
    get_password_reset_service,
)
from app.models.user import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    TwoFactorSetupResponse,
    TwoFactorVerifyRequest,
    UserResponse,
)
from app.services.auth_service import AuthService
from app.services.password_reset_service import PasswordResetService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Register a person or organization and return a bearer token."""
    try:
        return auth.register(request)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user"
        )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Authenticate with email or contact and password."""
    try:
        return auth.login(request.identifier, request.password)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )


@router.post("/2fa/verify", response_model=AuthResponse)
def verify_two_factor(request: TwoFactorVerifyRequest, auth: AuthService = Depends(get_auth_service)):
    """Complete a login with a TOTP or backup code."""
    try:
        return auth.verify_two_factor(request.identifier, request.code)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error verifying 2FA code: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="2FA verification failed"
        )


@router.post("/2fa/enable", response_model=TwoFactorSetupResponse)
def enable_two_factor(
    user_id: str = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        return auth.enable_two_factor(user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error enabling 2FA: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to enable 2FA"
        )


@router.post("/2fa/disable", response_model=MessageResponse)
def disable_two_factor(
    user_id: str = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        return MessageResponse(message=auth.disable_two_factor(user_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error disabling 2FA: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to disable 2FA"
        )


@router.post("/password-reset/request", response_model=MessageResponse)
def request_password_reset(
    request: PasswordResetRequest,
    resets: PasswordResetService = Depends(get_password_reset_service),
):
    """Send a reset link to the account's email."""
    try:
        return MessageResponse(message=resets.request_password_reset(request.email))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error requesting password reset: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to request password reset"
        )


@router.post("/password-reset/confirm", response_model=MessageResponse)
def confirm_password_reset(
    request: PasswordResetConfirm,
    resets: PasswordResetService = Depends(get_password_reset_service),
):
    """Set a new password using a reset token."""
    try:
        return MessageResponse(message=resets.confirm_password_reset(request.token, request.new_password))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error confirming password reset: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reset password"
        )


@router.get("/me", response_model=UserResponse)
def get_me(
    user_id: str = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    """Get current user information."""
    try:
        return auth.get_current_user(user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching current user: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user"
        )


@router.post("/logout", response_model=MessageResponse)
def logout(
    user_id: str = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    """Logout user (client-side token removal)."""
    logger.info(f"User logged out: {user_id}")
    return MessageResponse(message=auth.logout())
