# app/services/user_repository.py
# Credential store: users plus their person/organization rows, keyed by the same id

import logging
from typing import List, Optional

from pymongo.database import Database

from app.exceptions import IllegalUserTypeError
from app.models.user import OrganizationData, PersonData, UserDetails, UserRecord
from app.utils.constants import UserType
from app.utils.db_setup import ORGANIZATIONS, PERSONS, USERS
from app.utils.validators import normalize_email

logger = logging.getLogger(__name__)


def _to_document(user: UserRecord) -> dict:
    doc = user.model_dump(exclude={"id"})
    doc["_id"] = user.id
    doc["user_type"] = user.user_type.value
    return doc


def _to_record(doc: Optional[dict]) -> Optional[UserRecord]:
    if doc is None:
        return None
    data = dict(doc)
    data["id"] = data.pop("_id")
    return UserRecord(**data)


class UserRepository:
    def __init__(self, db: Database):
        self.users = db[USERS]
        self.persons = db[PERSONS]
        self.organizations = db[ORGANIZATIONS]

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return _to_record(self.users.find_one({"_id": user_id}))

    def find_by_email_or_contact(self, identifier: str) -> Optional[UserRecord]:
        """Match the identifier against either the email or the contact column."""
        if not identifier or not identifier.strip():
            return None
        identifier = identifier.strip()
        doc = self.users.find_one(
            {"$or": [{"email": normalize_email(identifier)}, {"contact": identifier}]}
        )
        return _to_record(doc)

    def exists_by_email(self, email: str) -> bool:
        return self.users.count_documents({"email": normalize_email(email)}, limit=1) > 0

    def exists_by_contact(self, contact: str) -> bool:
        return self.users.count_documents({"contact": contact}, limit=1) > 0

    def save(self, user: UserRecord) -> UserRecord:
        """Insert or replace the base record. Unique index violations raise DuplicateKeyError."""
        self.users.replace_one({"_id": user.id}, _to_document(user), upsert=True)
        return user

    def update_fields(self, user_id: str, fields: dict) -> bool:
        """Set only the given fields, leaving concurrent changes to other fields intact."""
        result = self.users.update_one({"_id": user_id}, {"$set": fields})
        return result.matched_count == 1

    def consume_backup_code(self, user_id: str, code: str) -> bool:
        """Atomically remove one backup code. False when it was already gone."""
        result = self.users.update_one(
            {"_id": user_id, "two_fa_enabled": True, "two_fa_backup_codes": code},
            {"$pull": {"two_fa_backup_codes": code}},
        )
        return result.modified_count == 1

    def insert_with_subtype(self, user: UserRecord, details: UserDetails) -> UserRecord:
        """Persist the base record and its person/organization row as one unit.

        If the subtype insert fails, the base record is deleted before the error
        propagates so no user is left without its subtype row.
        """
        self.users.insert_one(_to_document(user))
        try:
            self.save_subtype(user, details, is_new=True)
        except Exception:
            logger.error(f"Subtype insert failed for user {user.id}, rolling back base record")
            self.users.delete_one({"_id": user.id})
            raise
        return user

    def _subtype_collection(self, user_type):
        if user_type == UserType.PERSON:
            return self.persons
        if user_type == UserType.ORGANIZATION:
            return self.organizations
        raise IllegalUserTypeError(user_type)

    def save_subtype(self, user: UserRecord, details: UserDetails, is_new: bool = False) -> None:
        collection = self._subtype_collection(user.user_type)
        expected = PersonData if user.user_type == UserType.PERSON else OrganizationData
        if not isinstance(details, expected):
            raise IllegalUserTypeError(user.user_type)
        doc = details.model_dump()
        if is_new:
            collection.insert_one({"_id": user.id, **doc})
        else:
            collection.update_one({"_id": user.id}, {"$set": doc})

    def find_subtype(self, user: UserRecord) -> Optional[UserDetails]:
        """Second lookup keyed by the user id, dispatching on the discriminator."""
        collection = self._subtype_collection(user.user_type)
        doc = collection.find_one({"_id": user.id})
        if doc is None:
            return None
        doc.pop("_id", None)
        if user.user_type == UserType.PERSON:
            return PersonData(**doc)
        return OrganizationData(**doc)

    def find_all(self) -> List[UserRecord]:
        return [_to_record(doc) for doc in self.users.find().sort("registration_date_time", 1)]

    def find_all_by_type(self, user_type: UserType) -> List[UserRecord]:
        cursor = self.users.find({"user_type": user_type.value}).sort("registration_date_time", 1)
        return [_to_record(doc) for doc in cursor]
