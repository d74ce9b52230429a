# config.py
import os
from datetime import timedelta


def _int_env(name: str, default: int) -> int:
    val = os.getenv(name, "")
    # blank or garbage falls back to the default
    try:
        return int(val) if val.strip() else default
    except ValueError:
        return default

class BaseConfig:
    DEBUG = False
    TESTING = False
    JSON_SORT_KEYS = False
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB
    PORT = _int_env("PORT", 3000)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # No fallback: validate_required_secrets() refuses to start without it
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or None
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_TOKEN_LOCATION = ["headers"]

    # Mongo
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB = os.getenv("MONGO_DB", "smartprofile")

    # Generation service (Ollama)
    OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
    OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3")
    OLLAMA_TIMEOUT = _int_env("OLLAMA_TIMEOUT", 60)  # seconds

    # CORS / rate limits
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "60 per minute")
    RATELIMIT_ENABLED = True
    FORCE_HTTPS = False

class DevConfig(BaseConfig):
    DEBUG = True

class ProdConfig(BaseConfig):
    FORCE_HTTPS = True

class TestConfig(BaseConfig):
    TESTING = True
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = "test-only-jwt-secret"
    MONGO_DB = "smartprofile_test"

CONFIGS = {
    "dev": DevConfig,
    "prod": ProdConfig,
    "test": TestConfig,
}

def get_config(name: str = None):
    """Pick a config class by name, defaulting to the ENV variable."""
    name = (name or os.getenv("ENV") or "dev").lower()
    return CONFIGS.get(name, DevConfig)

def validate_required_secrets(config) -> None:
    """Fail startup when the token signing secret is missing, in every environment."""
    secret = config.get("JWT_SECRET_KEY") if isinstance(config, dict) else getattr(config, "JWT_SECRET_KEY", None)
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY must be set")
