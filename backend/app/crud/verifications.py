from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.enums import VerificationStatusEnum
from app.models.verifications import Verification
from app.scope.context import VerificationScope
from app.scope.scoping import get_scoped_or_404, scoped_query

MAX_TOKEN_GENERATION_ATTEMPTS = 5


class TokenGenerationExhausted(RuntimeError):
    """Every generated token collided with an existing one."""


def create_verification(
    db: Session,
    scope: VerificationScope,
    domain: str,
    method: str,
    token_factory,
) -> Verification:
    for _ in range(MAX_TOKEN_GENERATION_ATTEMPTS):
        verification = Verification(
            organization_id=scope.organization_id,
            session_id=scope.session_id,
            domain=domain,
            method=method,
            token=token_factory(),
            status=VerificationStatusEnum.PENDING.value,
        )
        db.add(verification)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            continue
        db.refresh(verification)
        return verification
    raise TokenGenerationExhausted("Unable to generate a unique verification token")


def get_verification(db: Session, scope: VerificationScope, verification_id: str) -> Verification:
    return get_scoped_or_404(db, Verification, scope, verification_id)


def list_verifications(db: Session, scope: VerificationScope) -> list[Verification]:
    return (
        scoped_query(db, Verification, scope)
        .order_by(Verification.created_at.desc())
        .all()
    )


def update_verification_status(
    db: Session,
    verification: Verification,
    *,
    previous_status: str,
    status: str,
    verified_at: datetime | None,
    checked_at: datetime,
) -> bool:
    """
    Conditionally move a record from previous_status to status.

    Returns False when another writer changed the status first; the
    caller's in-memory record is refreshed from the database either way.
    """
    result = db.execute(
        update(Verification)
        .where(
            Verification.id == verification.id,
            Verification.status == previous_status,
        )
        .values(status=status, verified_at=verified_at, last_checked_at=checked_at)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(verification)
    return result.rowcount == 1
