from functools import lru_cache

from app.core.config import settings
from app.verification.service import VerificationConfig, VerificationService
from app.webhooks.dispatcher import WebhookDispatcher


@lru_cache
def get_webhook_dispatcher() -> WebhookDispatcher:
    return WebhookDispatcher(
        timeout_seconds=settings.WEBHOOK_TIMEOUT_SECONDS,
        max_workers=settings.WEBHOOK_MAX_WORKERS,
        event_header=settings.WEBHOOK_EVENT_HEADER,
        user_agent=settings.CHALLENGE_USER_AGENT,
    )


@lru_cache
def get_verification_service() -> VerificationService:
    return VerificationService(
        VerificationConfig.from_settings(settings),
        dispatcher=get_webhook_dispatcher(),
    )
