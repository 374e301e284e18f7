import uuid

from sqlalchemy import Column, DateTime, String

from app.core.time import utcnow


def new_uuid() -> str:
    return str(uuid.uuid4())


class UUIDPrimaryKeyMixin:
    id = Column(String(36), primary_key=True, default=new_uuid)


class CreatedAtMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
