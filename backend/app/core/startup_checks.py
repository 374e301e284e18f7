"""
Startup-time checks for required configuration.
"""

from __future__ import annotations

from app.core.config import Settings, settings as default_settings


def _has_placeholder_secret(value: str | None) -> bool:
    if not value:
        return True
    lowered = value.strip().lower()
    return lowered in {"changeme", "change-me", "super-secret-key", "secret", "dev-secret"}


def run_startup_checks(settings: Settings | None = None) -> None:
    settings = settings or default_settings
    missing: list[str] = []
    insecure: list[str] = []

    if not settings.DATABASE_URL:
        missing.append("DATABASE_URL")
    if not settings.SECRET_KEY:
        missing.append("SECRET_KEY")

    if settings.is_production:
        if _has_placeholder_secret(settings.SECRET_KEY) or len(settings.SECRET_KEY or "") < 32:
            insecure.append("SECRET_KEY")
        if (settings.DATABASE_URL or "").startswith("sqlite"):
            insecure.append("DATABASE_URL")
        if not settings.SESSION_COOKIE_SECURE:
            insecure.append("SESSION_COOKIE_SECURE")

    if missing or insecure:
        parts = []
        if missing:
            parts.append(f"Missing required settings: {', '.join(sorted(set(missing)))}")
        if insecure:
            parts.append(f"Insecure settings detected: {', '.join(sorted(set(insecure)))}")
        raise RuntimeError("Startup checks failed. " + " ".join(parts))
