"""Repository for ProcessorCredential storage."""

from uuid import UUID

from sqlalchemy.orm import Session

from payback.models.credential import ProcessorCredential


class CredentialRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_for_user(self, user_id: UUID) -> ProcessorCredential | None:
        return (
            self.db.query(ProcessorCredential)
            .filter(ProcessorCredential.user_id == user_id)
            .first()
        )

    def upsert(self, user_id: UUID, secret_key: str) -> ProcessorCredential:
        credential = self.get_for_user(user_id)
        if credential is None:
            credential = ProcessorCredential(user_id=user_id, secret_key=secret_key)
            self.db.add(credential)
        else:
            credential.secret_key = secret_key  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(credential)
        return credential

    def delete(self, user_id: UUID) -> bool:
        credential = self.get_for_user(user_id)
        if not credential:
            return False
        self.db.delete(credential)
        self.db.commit()
        return True
