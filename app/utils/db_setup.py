# app/utils/db_setup.py
# Database connection and index setup utilities

import logging
import pymongo
from pymongo.database import Database

# Configure logging
logger = logging.getLogger(__name__)

USERS = "users"
PERSONS = "persons"
ORGANIZATIONS = "organizations"
PASSWORD_RESET_TOKENS = "password_reset_tokens"


def get_database(mongo_uri: str, db_name: str) -> Database:
    """Open a client and return the application database."""
    client = pymongo.MongoClient(mongo_uri)
    return client[db_name]


def setup_db_indexes(db: Database) -> None:
    """
    Set up the indexes the auth core relies on.
    This should be called during application startup.

    The unique indexes on email and contact are the real uniqueness guarantee;
    the existence checks done before an insert are only an early exit.
    """
    # Only string values take part, so users without an email (or contact) never collide
    db[USERS].create_index(
        [("email", pymongo.ASCENDING)],
        name="email_unique",
        unique=True,
        partialFilterExpression={"email": {"$type": "string"}},
    )
    logger.info("Created unique email index")

    db[USERS].create_index(
        [("contact", pymongo.ASCENDING)],
        name="contact_unique",
        unique=True,
        partialFilterExpression={"contact": {"$type": "string"}},
    )
    logger.info("Created unique contact index")

    db[USERS].create_index([("user_type", pymongo.ASCENDING)], name="user_type_1")

    db[PASSWORD_RESET_TOKENS].create_index(
        [("token", pymongo.ASCENDING)], name="token_unique", unique=True
    )
    # Supports the single "unused and unexpired" lookup on confirmation
    db[PASSWORD_RESET_TOKENS].create_index(
        [
            ("token", pymongo.ASCENDING),
            ("used", pymongo.ASCENDING),
            ("expires_at", pymongo.ASCENDING),
        ],
        name="token_used_expires_at_1",
    )
    db[PASSWORD_RESET_TOKENS].create_index(
        [("user_id", pymongo.ASCENDING), ("expires_at", pymongo.ASCENDING)],
        name="user_id_expires_at_1",
    )
    logger.info("Database indexes set up successfully")
