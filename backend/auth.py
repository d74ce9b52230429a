# auth.py
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt

from auth_service import identity_from_claims

auth_bp = Blueprint("auth", __name__)


def _services():
    return current_app.extensions["smartprofile"]

def _field(data: dict, key: str) -> str:
    # non-string values count as missing
    value = data.get(key)
    return value if isinstance(value, str) else ""

@auth_bp.route("/signup", methods=["POST"], strict_slashes=False)
def signup():
    """
    Request: { "name": "...", "email": "...", "password": "..." }
    Response: { "token": "...", "name": "...", "email": "..." }
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    result = _services().auth.signup(_field(data, "name"), _field(data, "email"), _field(data, "password"))
    return jsonify(result), 200

@auth_bp.route("/login", methods=["POST"], strict_slashes=False)
def login():
    """
    Request: { "email": "...", "password": "..." }
    Response: { "token": "...", "name": "...", "email": "..." }
    Bad credentials answer 400, same message for unknown email and wrong password.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    result = _services().auth.login(_field(data, "email"), _field(data, "password"))
    return jsonify(result), 200

def current_user() -> dict:
    """Identity of the verified token on this request; call under @jwt_required()."""
    return identity_from_claims(get_jwt())
