from urllib.parse import urlsplit

from sqlalchemy.orm import Session

from app.models.enums import WebhookEventEnum
from app.models.webhooks import Webhook

ALLOWED_WEBHOOK_EVENTS = {event.value for event in WebhookEventEnum}
MAX_WEBHOOKS_PER_ORGANIZATION = 20


def validate_webhook_url(url: str) -> str:
    value = (url or "").strip()
    parsed = urlsplit(value)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ValueError("Webhook URL must be an absolute http(s) URL")
    return value


def validate_webhook_events(events) -> list[str]:
    normalized: list[str] = []
    for event in events or []:
        if event not in ALLOWED_WEBHOOK_EVENTS:
            raise ValueError(f"Unsupported webhook event: {event}")
        if event not in normalized:
            normalized.append(event)
    if not normalized:
        raise ValueError("Select at least one event")
    return normalized


def create_webhook(
    db: Session,
    organization_id: str,
    url: str,
    events,
    *,
    is_active: bool = True,
) -> Webhook:
    active_count = (
        db.query(Webhook)
        .filter(Webhook.organization_id == organization_id, Webhook.is_active.is_(True))
        .count()
    )
    if active_count >= MAX_WEBHOOKS_PER_ORGANIZATION:
        raise ValueError(f"Maximum {MAX_WEBHOOKS_PER_ORGANIZATION} webhooks per organization")
    webhook = Webhook(
        organization_id=organization_id,
        url=validate_webhook_url(url),
        events=validate_webhook_events(events),
        is_active=is_active,
    )
    db.add(webhook)
    db.commit()
    db.refresh(webhook)
    return webhook


def list_webhooks(db: Session, organization_id: str) -> list[Webhook]:
    return (
        db.query(Webhook)
        .filter(Webhook.organization_id == organization_id)
        .order_by(Webhook.created_at.desc())
        .all()
    )


def list_subscribed_webhooks(db: Session, organization_id: str, event: str) -> list[Webhook]:
    # events is a JSON list, so membership is checked in Python to stay
    # portable across SQLite and Postgres.
    webhooks = (
        db.query(Webhook)
        .filter(Webhook.organization_id == organization_id, Webhook.is_active.is_(True))
        .all()
    )
    return [wh for wh in webhooks if event in (wh.events or [])]


def delete_webhook(db: Session, organization_id: str, webhook_id: str) -> bool:
    webhook = (
        db.query(Webhook)
        .filter(Webhook.id == webhook_id, Webhook.organization_id == organization_id)
        .first()
    )
    if not webhook:
        return False
    db.delete(webhook)
    db.commit()
    return True
