from sqlalchemy import Column, DateTime, Index, String

from app.core.db import Base
from app.models.enums import VerificationStatusEnum
from app.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class Verification(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "verifications"
    __table_args__ = (
        Index("ix_verifications_organization_created_at", "organization_id", "created_at"),
        Index("ix_verifications_session_created_at", "session_id", "created_at"),
    )

    # Exactly one of organization_id / session_id identifies the owning scope.
    organization_id = Column(String, nullable=True)
    session_id = Column(String, nullable=True)
    domain = Column(String, nullable=False)
    method = Column(String(20), nullable=False)
    token = Column(String, nullable=False, unique=True, index=True)
    status = Column(String(20), nullable=False, default=VerificationStatusEnum.PENDING.value)
    verified_at = Column(DateTime, nullable=True)
    last_checked_at = Column(DateTime, nullable=True)
