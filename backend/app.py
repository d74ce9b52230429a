# app.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager, jwt_required
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_talisman import Talisman
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

# --- Load env BEFORE importing config (so config sees env) ---
ENV_PATH = Path(__file__).with_name(".env")
load_dotenv(ENV_PATH)

# --- Local modules ---
from config import get_config, validate_required_secrets
from errors import AppError
from auth import auth_bp, current_user
from services import build_services

LOG = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def _app_error(e: AppError):
        if e.status_code >= 500:
            LOG.warning("%s %s -> %s: %s", request.method, request.path, e.status_code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        return jsonify({"error": "Request body too large"}), 413

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        LOG.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def _register_jwt_callbacks(jwt: JWTManager) -> None:
    # every token failure answers 401 {error}, like the rest of the API
    @jwt.unauthorized_loader
    def _missing(reason: str):
        return jsonify({"error": "Unauthorized"}), 401

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        return jsonify({"error": "Invalid token"}), 401

    @jwt.expired_token_loader
    def _expired(jwt_header, jwt_payload):
        return jsonify({"error": "Token has expired"}), 401


def create_app(config: Any = None, overrides: Optional[Mapping[str, Any]] = None,
               mongo=None, http=None) -> Flask:
    """
    Build the app and its services.

    `config` is a config class (defaults to the one selected by ENV), `overrides`
    patches individual keys; `mongo` / `http` are handed to build_services().
    """
    app = Flask(__name__, static_folder="static", static_url_path="/static")
    app.config.from_object(config or get_config())
    if overrides:
        app.config.update(overrides)
    validate_required_secrets(app.config)  # no signing secret, no server

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    _register_jwt_callbacks(JWTManager(app))
    CORS(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=False,
        allow_headers=["Authorization", "Content-Type"],
        methods=["GET", "POST", "OPTIONS"],
    )
    Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[app.config["RATELIMIT_DEFAULT"]],
        storage_uri="memory://",
    )
    Talisman(
        app,
        force_https=app.config["FORCE_HTTPS"],
        content_security_policy={
            "default-src": ["'self'"],
            "img-src": ["'self'", "data:"],
            "style-src": ["'self'", "'unsafe-inline'"],
            "script-src": ["'self'"],
            "connect-src": ["'self'"],
            "frame-ancestors": ["'none'"],
        },
        session_cookie_secure=app.config["FORCE_HTTPS"],
        frame_options="DENY",
        referrer_policy="strict-origin-when-cross-origin",
    )

    app.extensions["smartprofile"] = build_services(app.config, mongo=mongo, http=http)

    app.register_blueprint(auth_bp, url_prefix="/auth")
    _register_routes(app)
    _register_error_handlers(app)
    LOG.info("app ready: db=%s ollama=%s", app.config["MONGO_DB"], app.config["OLLAMA_URL"])
    return app


def _register_routes(app: Flask) -> None:
    # ------------------------------
    # Client page
    # ------------------------------
    @app.route("/")
    def home():
        return app.send_static_file("index.html")

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    # ------------------------------
    # Generation / history
    # ------------------------------
    @app.post("/generate")
    @jwt_required()
    def generate():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            data = {}
        summary = app.extensions["smartprofile"].generator.generate(current_user()["user_id"], data)
        return jsonify({"summary": summary})

    @app.get("/resumes")
    @jwt_required()
    def resumes():
        return jsonify(app.extensions["smartprofile"].generator.list_for_user(current_user()["user_id"]))


def main() -> None:
    app = create_app()
    try:
        app.run(host="0.0.0.0", port=app.config["PORT"], debug=app.config["DEBUG"], use_reloader=False)
    finally:
        app.extensions["smartprofile"].close()


if __name__ == "__main__":
    main()
