"""Lookup of the processor credential that belongs to a user."""

from uuid import UUID

from sqlalchemy.orm import Session

from payback.repositories.credential_repository import CredentialRepository
from payback.services.processor.base import ProcessorClient
from payback.services.processor.errors import CredentialMissing
from payback.services.processor.stripe_client import StripeProcessorClient


def get_credential_for_user(db: Session, user_id: UUID) -> str:
    """Return the user's processor secret or raise ``CredentialMissing``."""
    credential = CredentialRepository(db).get_for_user(user_id)
    if credential is None or not credential.secret_key:
        raise CredentialMissing(
            "Payment processor API key is not configured. Add it in your profile first."
        )
    return str(credential.secret_key)


def get_processor_client_for_user(db: Session, user_id: UUID) -> ProcessorClient:
    """Build a processor client bound to ``user_id``'s own credential."""
    return StripeProcessorClient(api_key=get_credential_for_user(db, user_id))
