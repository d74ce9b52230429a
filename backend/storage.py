# storage.py
from __future__ import annotations
from typing import Any, Dict, List

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from helpers import _now


def serialize_resume(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Mongo document -> JSON-safe dict."""
    created = doc.get("created_at")
    return {
        "id": str(doc["_id"]),
        "user_id": str(doc["user_id"]),
        "skills": doc.get("skills", ""),
        "role": doc.get("role", ""),
        "tone": doc.get("tone", ""),
        "experience": doc.get("experience", ""),
        "length": doc.get("length"),
        "summary": doc.get("summary", ""),
        "created_at": created.isoformat() if created else None,
    }

class ResumeStore:
    """Generated summaries in the `resumes` collection. Insert-only."""

    def __init__(self, db: Database):
        self.collection = db["resumes"]

    def ensure_indexes(self) -> None:
        self.collection.create_index([("user_id", ASCENDING)], name="resumes_user")
        self.collection.create_index([("created_at", ASCENDING)], name="resumes_created")

    def insert(self, user_id, skills: str, role: str, tone: str, experience: str,
               length: int, summary: str) -> Dict[str, Any]:
        doc = {
            "user_id": ObjectId(user_id),
            "skills": skills,
            "role": role,
            "tone": tone,
            "experience": experience,
            "length": length,
            "summary": summary,
            "created_at": _now(),
        }
        res = self.collection.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    def list_for_user(self, user_id) -> List[Dict[str, Any]]:
        # _id breaks ties between records created within the same millisecond
        cur = self.collection.find({"user_id": ObjectId(user_id)}).sort(
            [("created_at", DESCENDING), ("_id", DESCENDING)]
        )
        return [serialize_resume(d) for d in cur]
