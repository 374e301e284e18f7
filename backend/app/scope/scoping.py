"""
Helpers to ensure database access stays inside the caller's scope.
"""

from sqlalchemy.orm import Session

from app.scope.context import VerificationScope
from app.scope.errors import ScopedResourceNotFound


def _ensure_model_is_scopable(model) -> None:
    if not hasattr(model, "organization_id") or not hasattr(model, "session_id"):
        name = getattr(model, "__name__", str(model))
        raise ValueError(f"{name} does not define organization_id/session_id and cannot be scoped.")


def scoped_query(db: Session, model, scope: VerificationScope):
    """
    Return a query constrained to the given scope.

    Example:
        scoped_query(db, Verification, scope).all()
    """
    _ensure_model_is_scopable(model)
    if scope.is_organization:
        return db.query(model).filter(model.organization_id == scope.organization_id)
    return db.query(model).filter(
        model.organization_id.is_(None),
        model.session_id == scope.session_id,
    )


def get_scoped_or_404(db: Session, model, scope: VerificationScope, object_id):
    """
    Fetch by id inside the scope or raise ScopedResourceNotFound.

    Records outside the scope are reported exactly like missing ones.
    """
    resource = scoped_query(db, model, scope).filter(model.id == object_id).first()
    if not resource:
        raise ScopedResourceNotFound("Resource not found in scope")
    return resource
