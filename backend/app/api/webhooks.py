# Organization-scoped webhook administration. Only API key holders can
# manage subscriptions; the verification flow itself only reads them.

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.core.db import get_db
from app.crud.webhooks import create_webhook, delete_webhook, list_webhooks
from app.schemas.webhooks import WebhookCreate, WebhookOut
from app.scope.dependencies import require_organization_scope


router = APIRouter(tags=["webhooks"])


@router.get("/webhooks", response_model=List[WebhookOut])
def get_webhooks(db=Depends(get_db), scope=Depends(require_organization_scope)):
    return list_webhooks(db, scope.organization_id)


@router.post("/webhooks", response_model=WebhookOut, status_code=status.HTTP_201_CREATED)
def add_webhook(
    payload: WebhookCreate,
    db=Depends(get_db),
    scope=Depends(require_organization_scope),
):
    try:
        return create_webhook(db, scope.organization_id, str(payload.url), payload.events)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/webhooks/{webhook_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_webhook(
    webhook_id: str,
    db=Depends(get_db),
    scope=Depends(require_organization_scope),
):
    if not delete_webhook(db, scope.organization_id, webhook_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Webhook not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
