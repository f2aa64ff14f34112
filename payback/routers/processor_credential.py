"""Processor credential API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from payback.core.auth import get_current_user_id
from payback.core.database import get_db
from payback.repositories.credential_repository import CredentialRepository
from payback.schemas.credential import CredentialStatusResponse, CredentialUpdate

router = APIRouter()


@router.get(
    "/",
    response_model=CredentialStatusResponse,
    summary="Get processor credential status",
    responses={401: {"description": "Unauthorized – invalid or missing token"}},
)
async def get_processor_credential(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> CredentialStatusResponse:
    """Whether a key is configured, with a masked hint. The key itself is never returned."""
    credential = CredentialRepository(db).get_for_user(user_id)
    if credential is None:
        return CredentialStatusResponse(configured=False)
    return CredentialStatusResponse(configured=True, key_hint=credential.key_hint)


@router.put(
    "/",
    response_model=CredentialStatusResponse,
    summary="Set processor credential",
    responses={
        401: {"description": "Unauthorized – invalid or missing token"},
        422: {"description": "Invalid secret key"},
    },
)
async def set_processor_credential(
    data: CredentialUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> CredentialStatusResponse:
    credential = CredentialRepository(db).upsert(user_id, data.secret_key)
    return CredentialStatusResponse(configured=True, key_hint=credential.key_hint)


@router.delete(
    "/",
    status_code=204,
    summary="Remove processor credential",
    responses={401: {"description": "Unauthorized – invalid or missing token"}},
)
async def delete_processor_credential(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> None:
    """Remove the stored key. Removing a missing key is not an error."""
    CredentialRepository(db).delete(user_id)
