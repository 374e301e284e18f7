from __future__ import annotations

import json
from typing import Any

import requests


class WebhookDeliveryError(Exception):
    """Raised when a subscriber answers with a non-2xx status."""


def encode_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str)


def send_webhook(
    url: str,
    body: str,
    *,
    event: str,
    event_header: str = "X-Webhook-Event",
    user_agent: str = "DomainVerify/1.0",
    timeout: float = 10.0,
) -> int:
    headers = {
        "Content-Type": "application/json",
        "User-Agent": user_agent,
        event_header: event,
    }
    # Only the status line matters. The body is never read, so a subscriber
    # that drips its response cannot hold a worker past the read timeout.
    with requests.post(url, data=body, headers=headers, timeout=timeout, stream=True) as resp:
        status_code = resp.status_code
    if not 200 <= status_code < 300:
        raise WebhookDeliveryError(f"Webhook failed with status {status_code}")
    return status_code
