# tests/conftest.py
# Shared fixtures: in-memory MongoDB, fast bcrypt and wired services

import os

import mongomock
import pytest

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")

from app.config import TokenConfig
from app.models.user import RegisterRequest
from app.services.auth_service import AuthService
from app.services.password_reset_service import PasswordResetService
from app.services.profile_service import ProfileService
from app.services.two_factor_service import TwoFactorService
from app.services.user_repository import UserRepository
from app.utils.auth import PasswordHasher, TokenService
from app.utils.constants import UserType
from app.utils.db_setup import setup_db_indexes

TEST_SECRET = "test-secret-key"
PASSWORD = "Sup3rSecret!"


class RecordingNotifier:
    """Collects reset tokens instead of sending email."""

    def __init__(self):
        self.sent = []

    def __call__(self, to_email, token, expire_hours):
        self.sent.append((to_email, token, expire_hours))
        return to_email is not None

    @property
    def last_token(self):
        return self.sent[-1][1]


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    database = client["feedback_test"]
    setup_db_indexes(database)
    return database


@pytest.fixture
def users(db):
    return UserRepository(db)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service():
    return TokenService(TokenConfig(secret_key=TEST_SECRET, expire_minutes=60))


@pytest.fixture
def two_factor():
    return TwoFactorService(issuer="YowyobFeedback", valid_window=1)


@pytest.fixture
def auth_service(users, hasher, token_service, two_factor):
    return AuthService(users, hasher, token_service, two_factor)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def reset_service(db, users, hasher, notifier):
    return PasswordResetService(db, users, hasher, notifier=notifier)


@pytest.fixture
def profile_service(users, hasher):
    return ProfileService(users, hasher)


def person_request(**overrides) -> RegisterRequest:
    data = {
        "user_type": UserType.PERSON,
        "user_firstname": "Alice",
        "user_lastname": "Mbarga",
        "email": "alice@example.com",
        "password": PASSWORD,
        "occupation": "Engineer",
    }
    data.update(overrides)
    return RegisterRequest(**data)


def organization_request(**overrides) -> RegisterRequest:
    data = {
        "user_type": UserType.ORGANIZATION,
        "user_lastname": "Acme",
        "contact": "+237690000000",
        "password": PASSWORD,
        "location": "Douala",
        "domain": "Retail",
    }
    data.update(overrides)
    return RegisterRequest(**data)


@pytest.fixture
def client(db, auth_service, reset_service, profile_service, token_service):
    from fastapi.testclient import TestClient

    import main
    from app import dependencies

    main.app.dependency_overrides = {
        dependencies.get_db: lambda: db,
        dependencies.get_auth_service: lambda: auth_service,
        dependencies.get_password_reset_service: lambda: reset_service,
        dependencies.get_profile_service: lambda: profile_service,
        dependencies.get_token_service: lambda: token_service,
    }
    yield TestClient(main.app)
    main.app.dependency_overrides = {}
