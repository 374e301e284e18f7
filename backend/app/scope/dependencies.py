"""
FastAPI dependency helpers that turn request credentials into a scope.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.keys import generate_session_id
from app.crud.api_keys import is_api_key_authorized
from app.scope.context import VerificationScope
from app.scope.errors import ScopeForbidden, ScopeRequired


def resolve_scope(
    db: Session,
    *,
    api_key: Optional[str],
    organization_id: Optional[str],
    session_id: Optional[str],
) -> VerificationScope:
    """
    API keys act for exactly the organization they are authorized for;
    callers without a key fall back to their session bucket.
    """
    if api_key:
        organization_id = (organization_id or "").strip()
        if not organization_id:
            raise ScopeRequired("Organization must be provided via header")
        if not is_api_key_authorized(db, api_key, organization_id):
            raise ScopeForbidden("API key is not valid for this organization")
        return VerificationScope.for_organization(organization_id)
    if not session_id:
        raise ScopeRequired("Session is required")
    return VerificationScope.for_session(session_id)


def get_verification_scope(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> VerificationScope:
    api_key = request.headers.get(settings.API_KEY_HEADER_NAME)
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not api_key and not session_id:
        session_id = generate_session_id()
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            session_id,
            max_age=settings.SESSION_COOKIE_MAX_AGE_SECONDS,
            httponly=True,
            secure=settings.SESSION_COOKIE_SECURE,
            samesite="lax",
        )
    try:
        scope = resolve_scope(
            db,
            api_key=api_key,
            organization_id=request.headers.get(settings.ORGANIZATION_HEADER_NAME),
            session_id=session_id,
        )
    except ScopeRequired as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ScopeForbidden as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    request.state.organization_id = scope.organization_id
    return scope


def require_organization_scope(
    scope: VerificationScope = Depends(get_verification_scope),
) -> VerificationScope:
    if not scope.is_organization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="An organization API key is required",
        )
    return scope
