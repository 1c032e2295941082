# app/services/password_reset_service.py
# Single-use, time-boxed password reset tokens

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from pymongo.database import Database

from app.exceptions import (
    InvalidOrExpiredTokenError,
    TokenAlreadyUsedError,
    UserNotFoundError,
)
from app.models.user import PasswordResetTokenRecord
from app.services.user_repository import UserRepository
from app.utils import constants
from app.utils.auth import PasswordHasher, generate_reset_token
from app.utils.db_setup import PASSWORD_RESET_TOKENS

logger = logging.getLogger(__name__)

# (email or None, token, expire_hours) -> delivered?
ResetNotifier = Callable[[Optional[str], str, int], bool]


def _no_delivery(to_email: Optional[str], token: str, expire_hours: int) -> bool:
    return False


class PasswordResetService:
    def __init__(
        self,
        db: Database,
        users: UserRepository,
        hasher: PasswordHasher,
        notifier: ResetNotifier = _no_delivery,
        expire_hours: int = 24,
        enumeration_safe: bool = False,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.tokens = db[PASSWORD_RESET_TOKENS]
        self.users = users
        self.hasher = hasher
        self.notifier = notifier
        self.expire_hours = expire_hours
        self.enumeration_safe = enumeration_safe
        self.clock = clock

    def request_password_reset(self, identifier: str) -> str:
        """Mint a reset token for the account and hand it to the notifier."""
        logger.info(f"Password reset requested for: {identifier}")
        user = self.users.find_by_email_or_contact(identifier)
        if user is None:
            if self.enumeration_safe:
                logger.info("Password reset requested for an unknown identifier")
                return constants.PASSWORD_RESET_EMAIL_SENT
            raise UserNotFoundError()

        self._cleanup_expired_tokens(user.id)
        reset_token = self._create_reset_token(user.id)
        delivered = self.notifier(user.email, reset_token.token, self.expire_hours)
        if not delivered:
            logger.warning(f"Reset token for user {user.id} was created but not delivered")
        logger.info(f"Password reset token issued for user {user.id}")
        return constants.PASSWORD_RESET_EMAIL_SENT

    def confirm_password_reset(self, token: str, new_password: str) -> str:
        """Consume a token and set the new password."""
        logger.info("Password reset confirmation attempt")
        now = self.clock()
        # Claim the token in one atomic find-and-modify: only one concurrent confirm can match
        doc = self.tokens.find_one_and_update(
            {"token": token, "used": False, "expires_at": {"$gt": now}},
            {"$set": {"used": True, "used_at": now}},
        )
        if doc is None:
            raise InvalidOrExpiredTokenError()
        # doc is the pre-update document
        reset_token = self._to_record(doc)
        if reset_token.used:
            raise TokenAlreadyUsedError()

        if not self.users.update_fields(reset_token.user_id, {"password": self.hasher.hash(new_password)}):
            raise UserNotFoundError()
        logger.info(f"Password reset successful for user {reset_token.user_id}")
        return constants.PASSWORD_RESET_SUCCESS

    def find_by_token(self, token: str) -> Optional[PasswordResetTokenRecord]:
        doc = self.tokens.find_one({"token": token})
        return self._to_record(doc) if doc else None

    def _cleanup_expired_tokens(self, user_id: str) -> None:
        result = self.tokens.delete_many({"user_id": user_id, "expires_at": {"$lt": self.clock()}})
        if result.deleted_count:
            logger.info(f"Cleaned up {result.deleted_count} expired reset tokens for user {user_id}")

    def _create_reset_token(self, user_id: str) -> PasswordResetTokenRecord:
        now = self.clock()
        record = PasswordResetTokenRecord(
            id=str(uuid.uuid4()),
            token=generate_reset_token(),
            user_id=user_id,
            expires_at=now + timedelta(hours=self.expire_hours),
            used=False,
            created_at=now,
        )
        doc = record.model_dump(exclude={"id"})
        doc["_id"] = record.id
        self.tokens.insert_one(doc)
        return record

    @staticmethod
    def _to_record(doc: dict) -> PasswordResetTokenRecord:
        data = dict(doc)
        data["id"] = data.pop("_id")
        return PasswordResetTokenRecord(**data)
