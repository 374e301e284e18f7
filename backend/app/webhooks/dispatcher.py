"""
Best-effort fan-out of verification events to organization webhooks.

Subscribers are looked up on the caller's session, then each delivery
runs on a bounded thread pool so a slow or failing endpoint never holds
up the check response or the other endpoints. Nothing is retried.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.metrics import record_webhook_delivery
from app.crud.webhooks import list_subscribed_webhooks
from app.webhooks.sender import encode_payload, send_webhook


logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class WebhookDispatcher:
    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        max_workers: int = DEFAULT_MAX_WORKERS,
        event_header: str = "X-Webhook-Event",
        user_agent: str = "DomainVerify/1.0",
        executor: Executor | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._event_header = event_header
        self._user_agent = user_agent
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="webhook",
        )

    def dispatch(
        self,
        db: Session,
        organization_id: str,
        event: str,
        payload: dict[str, Any],
    ) -> list[Future]:
        try:
            webhooks = list_subscribed_webhooks(db, organization_id, event)
        except SQLAlchemyError:
            logger.exception(
                "webhook.lookup_failed",
                extra={"organization_id": organization_id, "event": event},
            )
            return []
        if not webhooks:
            return []

        body = encode_payload(payload)
        # Copy plain values out of the ORM rows; the session stays on this thread.
        targets = [(wh.id, wh.url) for wh in webhooks]
        return [
            self._executor.submit(self._deliver, webhook_id, url, event, body)
            for webhook_id, url in targets
        ]

    def _deliver(self, webhook_id: str, url: str, event: str, body: str) -> bool:
        try:
            status_code = send_webhook(
                url,
                body,
                event=event,
                event_header=self._event_header,
                user_agent=self._user_agent,
                timeout=self._timeout_seconds,
            )
        except Exception as exc:
            logger.warning(
                "webhook.delivery_failed",
                extra={"webhook_id": webhook_id, "url": url, "event": event, "reason": str(exc)},
            )
            record_webhook_delivery(event=event, success=False)
            return False
        logger.info(
            "webhook.delivered",
            extra={"webhook_id": webhook_id, "url": url, "event": event, "status_code": status_code},
        )
        record_webhook_delivery(event=event, success=True)
        return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
