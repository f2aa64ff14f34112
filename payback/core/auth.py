from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from payback.core.config import settings
from payback.core.database import get_db
from payback.services.credentials import get_processor_client_for_user
from payback.services.processor.base import ProcessorClient
from payback.services.processor.errors import CredentialMissing


def get_current_user_id(request: Request) -> UUID:
    """Return the user id carried by the bearer token.

    Tokens are issued by the authentication service; this only verifies the
    signature and expiry and trusts the ``sub`` (or ``user_id``) claim.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Authorization header is required")

    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = auth_header[7:].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Token is required")

    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    subject = claims.get("sub") or claims.get("user_id")
    try:
        return UUID(str(subject))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token subject") from None


def get_processor_client(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> ProcessorClient:
    """Processor client bound to the current user's own credential."""
    try:
        return get_processor_client_for_user(db, user_id)
    except CredentialMissing as e:
        raise HTTPException(status_code=400, detail=e.message) from None
