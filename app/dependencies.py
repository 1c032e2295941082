# app/dependencies.py
# Service wiring and FastAPI dependency providers

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from app.config import Settings
from app.exceptions import MissingTokenError
from app.services.auth_service import AuthService
from app.services.email_service import EmailService
from app.services.password_reset_service import PasswordResetService
from app.services.profile_service import ProfileService
from app.services.two_factor_service import TwoFactorService
from app.services.user_repository import UserRepository
from app.utils.auth import PasswordHasher, TokenService
from app.utils.db_setup import get_database

logger = logging.getLogger(__name__)

# auto_error off so a missing header maps to our own 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache()
def get_db() -> Database:
    settings = get_settings()
    logger.info(f"Connecting to MongoDB database: {settings.mongo_db_name}")
    return get_database(settings.mongo_uri, settings.mongo_db_name)


@lru_cache()
def get_user_repository() -> UserRepository:
    return UserRepository(get_db())


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService(get_settings().token_config())


@lru_cache()
def get_two_factor_service() -> TwoFactorService:
    settings = get_settings()
    return TwoFactorService(issuer=settings.totp_issuer, valid_window=settings.totp_valid_window)


@lru_cache()
def get_email_service() -> EmailService:
    settings = get_settings()
    return EmailService(settings.smtp, frontend_url=settings.frontend_url)


@lru_cache()
def get_auth_service() -> AuthService:
    return AuthService(
        get_user_repository(),
        get_password_hasher(),
        get_token_service(),
        get_two_factor_service(),
    )


@lru_cache()
def get_password_reset_service() -> PasswordResetService:
    settings = get_settings()
    return PasswordResetService(
        get_db(),
        get_user_repository(),
        get_password_hasher(),
        notifier=get_email_service().send_password_reset_email,
        expire_hours=settings.password_reset_token_expire_hours,
        enumeration_safe=settings.password_reset_enumeration_safe,
    )


@lru_cache()
def get_profile_service() -> ProfileService:
    return ProfileService(get_user_repository(), get_password_hasher())


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Id of the user named by the bearer token."""
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return tokens.verify(credentials.credentials)
