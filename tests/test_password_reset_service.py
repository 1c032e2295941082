# tests/test_password_reset_service.py
# Reset token issue, expiry and single use

from datetime import datetime, timedelta

import pytest

from app.exceptions import InvalidOrExpiredTokenError, UserNotFoundError
from app.services.password_reset_service import PasswordResetService
from app.utils import constants

from conftest import PASSWORD, RecordingNotifier, organization_request, person_request

NEW_PASSWORD = "An0therSecret!"


def test_request_issues_token_and_notifies(auth_service, reset_service, notifier):
    user_id = auth_service.register(person_request()).user_response_dto.user_id

    assert reset_service.request_password_reset("alice@example.com") == constants.PASSWORD_RESET_EMAIL_SENT
    to_email, token, expire_hours = notifier.sent[-1]
    assert to_email == "alice@example.com"
    assert expire_hours == 24

    record = reset_service.find_by_token(token)
    assert record.user_id == user_id
    assert record.used is False
    assert timedelta(hours=23) < record.expires_at - record.created_at <= timedelta(hours=24)


def test_contact_only_account_gets_no_email(auth_service, reset_service, notifier):
    auth_service.register(organization_request())
    assert reset_service.request_password_reset("+237690000000") == constants.PASSWORD_RESET_EMAIL_SENT
    assert notifier.sent[-1][0] is None


def test_request_for_unknown_user(reset_service):
    with pytest.raises(UserNotFoundError):
        reset_service.request_password_reset("nobody@example.com")


def test_enumeration_safe_request_for_unknown_user(db, users, hasher, notifier):
    service = PasswordResetService(db, users, hasher, notifier=notifier, enumeration_safe=True)
    assert service.request_password_reset("nobody@example.com") == constants.PASSWORD_RESET_EMAIL_SENT
    assert notifier.sent == []
    assert db["password_reset_tokens"].count_documents({}) == 0


def test_confirm_changes_password_once(auth_service, reset_service, notifier):
    auth_service.register(person_request())
    reset_service.request_password_reset("alice@example.com")
    token = notifier.last_token

    assert reset_service.confirm_password_reset(token, NEW_PASSWORD) == constants.PASSWORD_RESET_SUCCESS
    assert auth_service.login("alice@example.com", NEW_PASSWORD).token is not None

    record = reset_service.find_by_token(token)
    assert record.used is True
    assert record.used_at is not None

    with pytest.raises(InvalidOrExpiredTokenError) as exc:
        reset_service.confirm_password_reset(token, "YetAn0therOne!")
    assert exc.value.status_code == 400
    assert auth_service.login("alice@example.com", NEW_PASSWORD).token is not None


def test_unknown_token(reset_service):
    with pytest.raises(InvalidOrExpiredTokenError):
        reset_service.confirm_password_reset("does-not-exist", NEW_PASSWORD)


def test_expired_token_is_rejected(auth_service, db, users, hasher, reset_service):
    auth_service.register(person_request())
    notifier = RecordingNotifier()
    two_days_ago = PasswordResetService(
        db, users, hasher, notifier=notifier,
        clock=lambda: datetime.utcnow() - timedelta(days=2),
    )
    two_days_ago.request_password_reset("alice@example.com")

    with pytest.raises(InvalidOrExpiredTokenError):
        reset_service.confirm_password_reset(notifier.last_token, NEW_PASSWORD)
    assert auth_service.login("alice@example.com", PASSWORD).token is not None


def test_new_request_cleans_up_expired_tokens(auth_service, db, users, hasher, reset_service, notifier):
    auth_service.register(person_request())
    old = PasswordResetService(
        db, users, hasher, notifier=RecordingNotifier(),
        clock=lambda: datetime.utcnow() - timedelta(days=2),
    )
    old.request_password_reset("alice@example.com")
    assert db["password_reset_tokens"].count_documents({}) == 1

    reset_service.request_password_reset("alice@example.com")
    tokens = list(db["password_reset_tokens"].find())
    assert len(tokens) == 1
    assert tokens[0]["token"] == notifier.last_token


def test_request_with_case_variant_email(auth_service, reset_service, notifier):
    auth_service.register(person_request())
    reset_service.request_password_reset("ALICE@Example.com")
    assert notifier.sent[-1][0] == "alice@example.com"


def test_token_is_claimed_before_password_changes(auth_service, reset_service, hasher, notifier, monkeypatch):
    auth_service.register(person_request())
    reset_service.request_password_reset("alice@example.com")
    token = notifier.last_token

    # A second confirm arriving while the first is still hashing
    original_hash = hasher.hash
    racing = []

    def hash_during_race(password):
        if not racing:
            racing.append(None)
            with pytest.raises(InvalidOrExpiredTokenError):
                reset_service.confirm_password_reset(token, "Racing-Passw0rd")
        return original_hash(password)

    monkeypatch.setattr(hasher, "hash", hash_during_race)
    assert reset_service.confirm_password_reset(token, NEW_PASSWORD) == constants.PASSWORD_RESET_SUCCESS
    assert racing == [None]
    assert auth_service.login("alice@example.com", NEW_PASSWORD).token is not None
