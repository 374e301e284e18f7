from sqlalchemy import JSON, Boolean, Column, String, Text

from app.core.db import Base
from app.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class Webhook(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "webhooks"

    organization_id = Column(String, nullable=False, index=True)
    url = Column(Text, nullable=False)
    events = Column(JSON, nullable=False, default=list)  # e.g. ["verification.completed"]
    is_active = Column(Boolean, nullable=False, default=True)
