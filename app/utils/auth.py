# app/utils/auth.py
# Password hashing and JWT bearer token handling

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import TokenConfig
from app.exceptions import InvalidSignatureError, MalformedTokenError, TokenExpiredError
from app.models.user import UserRecord

logger = logging.getLogger(__name__)

USER_ID_CLAIM = "user_id"
ROLE_CLAIM = "role"


class PasswordHasher:
    """bcrypt wrapper. Plaintext passwords never leave this class."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )
        self._dummy_hash = None

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def matches(self, password: str, hashed_password: Optional[str]) -> bool:
        if not password or not hashed_password:
            return False
        try:
            return self._context.verify(password, hashed_password)
        except (ValueError, TypeError):
            logger.warning("Password verification against an unrecognised hash")
            return False

    def burn(self, password: str) -> None:
        """Spend one verify's worth of work so unknown users cost the same as wrong passwords."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_urlsafe(16))
        self.matches(password or "x", self._dummy_hash)


def generate_reset_token() -> str:
    """Generate a secure password reset token."""
    return secrets.token_urlsafe(32)


class TokenService:
    """Issues and verifies stateless HS256 bearer tokens.

    There is no revocation list: logging out is the client discarding its
    token, and a leaked token stays valid until ``exp``.
    """

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = datetime.utcnow):
        self._config = config
        self._clock = clock

    @property
    def expires_in_seconds(self) -> int:
        return self._config.expire_minutes * 60

    def issue(self, user: UserRecord, now: Optional[datetime] = None) -> str:
        """Create a signed token carrying the user's id and role."""
        issued_at = now or self._clock()
        expire = issued_at + timedelta(minutes=self._config.expire_minutes)
        claims = {
            "sub": user.subject,
            USER_ID_CLAIM: user.id,
            ROLE_CLAIM: user.user_type.value,
            "iat": issued_at,
            "exp": expire,
        }
        token = jwt.encode(claims, self._config.secret_key, algorithm=self._config.algorithm)
        logger.debug(f"JWT issued for user {user.id}, expires in {self._config.expire_minutes} minutes")
        return token

    def verify(self, token: str) -> str:
        """Return the user id carried by a valid token.

        Raises MalformedTokenError when the token is not a well-formed JWT,
        InvalidSignatureError when the signature does not match and
        TokenExpiredError when the signature is good but ``exp`` has passed.
        """
        if not token:
            raise MalformedTokenError()
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError:
            raise MalformedTokenError()

        try:
            payload = jwt.decode(token, self._config.secret_key, algorithms=[self._config.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.warning(f"JWT rejected: {e}")
            raise InvalidSignatureError()

        user_id = payload.get(USER_ID_CLAIM)
        try:
            return str(uuid.UUID(str(user_id)))
        except ValueError:
            raise MalformedTokenError()
