import hashlib
import hmac
import secrets

from app.core.config import settings

API_KEY_PREFIX = "dv_"


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"


def generate_session_id() -> str:
    return secrets.token_urlsafe(24)


def hash_token(token: str) -> str:
    digest = hmac.new(settings.SECRET_KEY.encode(), token.encode(), hashlib.sha256)
    return digest.hexdigest()
