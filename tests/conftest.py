"""Shared fixtures: a Flask app wired to mongomock and a scripted generation service."""

import mongomock
import pytest
import requests

from app import create_app
from config import TestConfig


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """Stands in for the requests module; replies with queued responses or exceptions."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def reply(self, status_code=200, payload=None, text=None):
        self.replies.append(FakeResponse(status_code, payload, text))

    def fail(self, exc: Exception):
        self.replies.append(exc)

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if not self.replies:
            raise requests.ConnectionError("no reply scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def llm_session():
    return FakeSession()


@pytest.fixture
def app(llm_session):
    app = create_app(TestConfig, mongo=mongomock.MongoClient(), http=llm_session)
    yield app
    app.extensions["smartprofile"].close()


@pytest.fixture
def services(app):
    return app.extensions["smartprofile"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


def signup(client, name="Ada", email="ada@x.com", password="secret1"):
    return client.post("/auth/signup", json={"name": name, "email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
