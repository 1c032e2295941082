# app/config.py
# Environment-backed settings for the auth core

import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel


DEFAULT_JWT_SECRET = "default_secret_for_development_only_change_in_production"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class TokenConfig(BaseModel):
    """Signing key, algorithm and lifetime handed to the token service."""

    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = 1440  # 24 hours


class SmtpConfig(BaseModel):
    host: Optional[str] = None
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.sender)


class Settings(BaseModel):
    mongo_uri: Optional[str] = None
    mongo_db_name: str = "feedback"
    environment: str = "development"
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440
    password_reset_token_expire_hours: int = 24
    password_reset_enumeration_safe: bool = False
    bcrypt_rounds: int = 12
    totp_issuer: str = "YowyobFeedback"
    totp_valid_window: int = 1
    frontend_url: str = "http://localhost:8080"
    smtp: SmtpConfig = SmtpConfig()

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and .env, if present)."""
        load_dotenv()
        return cls(
            mongo_uri=os.getenv("MONGO_URI"),
            mongo_db_name=os.getenv("MONGO_DB_NAME", "feedback"),
            environment=os.getenv("ENVIRONMENT", "development"),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")),
            password_reset_token_expire_hours=int(os.getenv("PASSWORD_RESET_TOKEN_EXPIRE_HOURS", "24")),
            password_reset_enumeration_safe=_env_bool("PASSWORD_RESET_ENUMERATION_SAFE"),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            totp_issuer=os.getenv("TOTP_ISSUER", "YowyobFeedback"),
            totp_valid_window=int(os.getenv("TOTP_VALID_WINDOW", "1")),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:8080"),
            smtp=SmtpConfig(
                host=os.getenv("SMTP_HOST"),
                port=int(os.getenv("SMTP_PORT", 587)),
                user=os.getenv("SMTP_USER"),
                password=os.getenv("SMTP_PASS"),
                sender=os.getenv("EMAIL_SENDER"),
            ),
        )

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret_key == DEFAULT_JWT_SECRET

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            expire_minutes=self.access_token_expire_minutes,
        )
