# auth_store.py
from __future__ import annotations
from typing import Optional, Dict, Any

from passlib.hash import pbkdf2_sha256
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError
from bson import ObjectId
from bson.errors import InvalidId

from errors import ConflictError
from helpers import _now


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()

# -------- Passwords --------
def hash_password(pw: str) -> str:
    # salted, 29000+ rounds by default
    return pbkdf2_sha256.hash(pw)

def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return pbkdf2_sha256.verify(pw, pw_hash)
    except (ValueError, TypeError):
        # malformed or missing stored hash
        return False

# -------- Users --------
class UserStore:
    """Credential records in the `users` collection."""

    def __init__(self, db: Database):
        self.collection = db["users"]

    def ensure_indexes(self) -> None:
        self.collection.create_index([("email", ASCENDING)], unique=True, name="uniq_email")

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": normalize_email(email)})

    def get(self, user_id) -> Optional[Dict[str, Any]]:
        try:
            oid = user_id if isinstance(user_id, ObjectId) else ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        return self.collection.find_one({"_id": oid})

    def create(self, name: str, email: str, pw_hash: str) -> Dict[str, Any]:
        doc = {
            "name": (name or "").strip(),
            "email": normalize_email(email),
            "pw_hash": pw_hash,
            "created_at": _now(),
        }
        try:
            res = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("User already exists")
        doc["_id"] = res.inserted_id
        return doc
