# services.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pymongo import MongoClient

from auth_service import AuthService
from auth_store import UserStore
from generator import GenerationGateway
from llm_client import OllamaClient
from storage import ResumeStore


@dataclass
class Services:
    """Everything a request handler needs, built once at startup."""

    mongo: MongoClient
    users: UserStore
    resumes: ResumeStore
    llm: OllamaClient
    auth: AuthService
    generator: GenerationGateway

    def close(self) -> None:
        self.mongo.close()


def build_services(config: Mapping[str, Any], mongo: Optional[MongoClient] = None,
                   http=None) -> Services:
    """Connect to Mongo, ensure indexes and wire the services together.

    `mongo` and `http` are injectable so tests can pass mongomock and a fake HTTP transport.
    """
    if mongo is None:
        mongo = MongoClient(config["MONGO_URI"], serverSelectionTimeoutMS=5000)
    db = mongo[config["MONGO_DB"]]

    users = UserStore(db)
    resumes = ResumeStore(db)
    users.ensure_indexes()
    resumes.ensure_indexes()

    llm = OllamaClient(
        config["OLLAMA_URL"],
        config["OLLAMA_MODEL"],
        timeout=config["OLLAMA_TIMEOUT"],
        http=http,
    )
    return Services(
        mongo=mongo,
        users=users,
        resumes=resumes,
        llm=llm,
        auth=AuthService(users),
        generator=GenerationGateway(llm, resumes),
    )
