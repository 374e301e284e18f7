# Central place for all configurable settings. We use Pydantic's
# BaseSettings so values can be read from env vars or a .env file.
# Services receive the pieces they need at construction time rather
# than importing this module directly.

import json
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def safe_json_loads(value):
    try:
        return json.loads(value)
    except Exception:
        return value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_json_loads=safe_json_loads,
    )

    # Core DB connection string, like sqlite:///./app.db or Postgres URL.
    DATABASE_URL: str

    # Secret used to key API key hashes. Must be kept private in production.
    SECRET_KEY: str

    ENVIRONMENT: str = "development"
    APP_NAME: str = "Domain Verify"
    APP_URL: str = "http://localhost:5000"

    # Branding shared with the dashboard via GET /config.
    BRAND_PRIMARY_COLOR: str = "#6366f1"
    BRAND_ACCENT_COLOR: str = "#8b5cf6"
    COMPANY_NAME: str = "Your Company"
    COMPANY_WEBSITE: str = ""
    SUPPORT_EMAIL: str = ""
    LOGO_URL: str = ""
    LOGO_DARK_URL: str = ""

    # Feature switches.
    ENABLE_WEBHOOKS: bool = True

    # Challenge tokens and proof lookups.
    VERIFICATION_TOKEN_PREFIX: str = "verify-domain-"
    VERIFICATION_TOKEN_LENGTH: int = Field(default=20, ge=20)
    DNS_CHALLENGE_SUBDOMAIN: str = "_domainverify"
    FILE_CHALLENGE_PATH: str = "/domain-verification.txt"
    CHALLENGE_USER_AGENT: str = "DomainVerify/1.0"
    DNS_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    HTTP_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    # Upper bound on the challenge file body; larger responses never match.
    FILE_CHALLENGE_MAX_BYTES: int = Field(default=4096, gt=0)

    # Outbound webhook delivery.
    WEBHOOK_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    WEBHOOK_MAX_WORKERS: int = Field(default=8, gt=0)
    WEBHOOK_EVENT_HEADER: str = "X-Webhook-Event"

    # Caller scope resolution: API consumers send a key plus the
    # organization it acts for; browser callers get a session bucket.
    API_KEY_HEADER_NAME: str = "X-API-Key"
    ORGANIZATION_HEADER_NAME: str = "X-Organization-ID"
    SESSION_COOKIE_NAME: str = "dv_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_COOKIE_MAX_AGE_SECONDS: int = 7 * 24 * 60 * 60

    # CORS origins allowed to call the API from a browser.
    CORS_ALLOW_ORIGINS: list[str] = Field(default_factory=list)

    LOG_LEVEL: str = "INFO"

    # Toggle SQLAlchemy echo logs. Useful for debugging queries locally.
    DB_ECHO: bool = False

    @field_validator("DNS_CHALLENGE_SUBDOMAIN", mode="before")
    @classmethod
    def _strip_subdomain(cls, value):
        if isinstance(value, str):
            return value.strip().strip(".")
        return value

    @field_validator("FILE_CHALLENGE_PATH", mode="before")
    @classmethod
    def _ensure_leading_slash(cls, value):
        if isinstance(value, str) and not value.startswith("/"):
            return f"/{value}"
        return value

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def _parse_list_values(cls, value):
        if isinstance(value, str):
            parts = [p.strip() for p in value.split(",") if p.strip()]
            return parts
        return value

    @property
    def is_production(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod"}


# Instantiate a single settings object for app-wide import.
settings = Settings()


def get_branding(cfg: Optional[Settings] = None) -> dict:
    cfg = cfg or settings
    return {
        "primaryColor": cfg.BRAND_PRIMARY_COLOR,
        "accentColor": cfg.BRAND_ACCENT_COLOR,
        "companyName": cfg.COMPANY_NAME,
        "companyWebsite": cfg.COMPANY_WEBSITE,
        "supportEmail": cfg.SUPPORT_EMAIL,
        "logoUrl": cfg.LOGO_URL,
        "logoDarkUrl": cfg.LOGO_DARK_URL,
    }
