from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_verification_service
from app.core.db import get_db
from app.schemas.verifications import (
    VerificationCreateRequest,
    VerificationInstructions,
    VerificationOut,
)
from app.scope.dependencies import get_verification_scope
from app.verification.errors import (
    VerificationNotFound,
    VerificationPersistenceError,
    VerificationValidationError,
)


router = APIRouter(tags=["verifications"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Verification not found")


@router.post("/verifications", response_model=VerificationOut)
def create_verification(
    payload: VerificationCreateRequest,
    db=Depends(get_db),
    scope=Depends(get_verification_scope),
    service=Depends(get_verification_service),
):
    try:
        return service.create(db, scope, payload.domain, payload.method.value)
    except VerificationValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.to_detail(),
        ) from exc
    except VerificationPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create verification",
        ) from exc


@router.get("/verifications", response_model=List[VerificationOut])
def list_verifications(
    db=Depends(get_db),
    scope=Depends(get_verification_scope),
    service=Depends(get_verification_service),
):
    return service.list(db, scope)


@router.get("/verifications/{verification_id}", response_model=VerificationOut)
def get_verification(
    verification_id: str,
    db=Depends(get_db),
    scope=Depends(get_verification_scope),
    service=Depends(get_verification_service),
):
    try:
        return service.get(db, verification_id, scope)
    except VerificationNotFound as exc:
        raise _not_found() from exc


@router.get(
    "/verifications/{verification_id}/instructions",
    response_model=VerificationInstructions,
)
def get_verification_instructions(
    verification_id: str,
    db=Depends(get_db),
    scope=Depends(get_verification_scope),
    service=Depends(get_verification_service),
):
    try:
        return service.instructions(db, verification_id, scope)
    except VerificationNotFound as exc:
        raise _not_found() from exc


@router.post("/verifications/{verification_id}/check", response_model=VerificationOut)
def check_verification(
    verification_id: str,
    db=Depends(get_db),
    scope=Depends(get_verification_scope),
    service=Depends(get_verification_service),
):
    try:
        return service.check(db, verification_id, scope)
    except VerificationNotFound as exc:
        raise _not_found() from exc
    except VerificationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except VerificationPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check verification",
        ) from exc
