"""
Seed script for dev/demo environments: one organization API key and one
webhook subscribed to both verification events.

Usage:
    python scripts/seed.py --organization acme --webhook-url https://example.com/hooks/verify
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
# Make backend package importable when running from repo root.
sys.path.append(str(ROOT / "backend"))

from app import models  # noqa: E402,F401
from app.core.config import settings  # noqa: E402
from app.core.db import Base, SessionLocal, engine  # noqa: E402
from app.crud.api_keys import create_api_key  # noqa: E402
from app.crud.webhooks import ALLOWED_WEBHOOK_EVENTS, create_webhook, list_webhooks  # noqa: E402


def ensure_not_production() -> None:
    if settings.is_production:
        print("Refusing to seed in production.", file=sys.stderr)
        sys.exit(1)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed an organization API key and webhook.")
    parser.add_argument("--organization", default="demo-org")
    parser.add_argument("--key-name", default="Seed key")
    parser.add_argument("--webhook-url", default=None)
    return parser.parse_args()


def seed(organization_id: str, key_name: str, webhook_url: str | None) -> None:
    ensure_not_production()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        api_key, raw_key = create_api_key(db, organization_id, key_name)
        print(f"API key for {organization_id} ({api_key.id}): {raw_key}")

        if webhook_url:
            existing = {wh.url for wh in list_webhooks(db, organization_id)}
            if webhook_url in existing:
                print(f"Webhook already registered: {webhook_url}")
            else:
                webhook = create_webhook(
                    db,
                    organization_id,
                    webhook_url,
                    sorted(ALLOWED_WEBHOOK_EVENTS),
                )
                print(f"Webhook {webhook.id} -> {webhook.url} ({', '.join(webhook.events)})")


if __name__ == "__main__":
    args = _parse_args()
    seed(args.organization, args.key_name, args.webhook_url)
