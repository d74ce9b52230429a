# auth_service.py
from __future__ import annotations
import logging
from typing import Any, Dict

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import ExpiredSignatureError, PyJWTError
from pymongo.errors import PyMongoError
from bson import ObjectId

from auth_store import UserStore, hash_password, verify_password, normalize_email
from errors import AuthError, ConflictError, InternalError, ValidationError

LOG = logging.getLogger(__name__)


def identity_from_claims(claims: Dict[str, Any]) -> Dict[str, Any]:
    """Decoded access-token claims -> {user_id, email}. The subject must be a user ObjectId."""
    sub = claims.get("sub")
    if claims.get("type") != "access" or not isinstance(sub, str) or not ObjectId.is_valid(sub):
        raise AuthError("Invalid token")
    return {"user_id": sub, "email": claims.get("email")}


class AuthService:
    """Signup, login and stateless bearer-token checks.

    Tokens are flask-jwt-extended access tokens, so every call that issues or
    verifies one must run inside a Flask app context.
    """

    def __init__(self, users: UserStore):
        self.users = users

    def issue_token(self, user: Dict[str, Any]) -> str:
        # expiry comes from JWT_ACCESS_TOKEN_EXPIRES
        return create_access_token(identity=str(user["_id"]), additional_claims={"email": user["email"]})

    def _session(self, user: Dict[str, Any]) -> Dict[str, str]:
        return {"token": self.issue_token(user), "name": user["name"], "email": user["email"]}

    def signup(self, name: str, email: str, password: str) -> Dict[str, str]:
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationError("Missing fields")

        try:
            if self.users.find_by_email(email):
                raise ConflictError("User already exists")
            # create() maps a unique-index race to the same ConflictError
            user = self.users.create(name, email, hash_password(password))
        except PyMongoError as e:
            LOG.exception("signup failed for %s", email)
            raise InternalError("Signup failed") from e

        LOG.info("signup ok: %s", email)
        return self._session(user)

    def login(self, email: str, password: str) -> Dict[str, str]:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Missing fields")

        try:
            user = self.users.find_by_email(email)
        except PyMongoError as e:
            LOG.exception("login lookup failed for %s", email)
            raise InternalError("Login failed") from e

        # same message for unknown email and wrong password
        if not user or not verify_password(password, user.get("pw_hash", "")):
            LOG.info("login rejected: %s", email)
            raise AuthError("Invalid credentials", status_code=400)

        LOG.info("login ok: %s", email)
        return self._session(user)

    def verify(self, token: str) -> Dict[str, Any]:
        if not token:
            raise AuthError("Unauthorized")
        try:
            decoded = decode_token(token)
        except ExpiredSignatureError:
            raise AuthError("Token has expired")
        except (PyJWTError, JWTExtendedException):
            raise AuthError("Invalid token")
        return identity_from_claims(decoded)
