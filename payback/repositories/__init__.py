from payback.repositories.credential_repository import CredentialRepository
from payback.repositories.idempotency_repository import IdempotencyRepository
from payback.repositories.recovery_repository import RecoveryRepository

__all__ = [
    "CredentialRepository",
    "IdempotencyRepository",
    "RecoveryRepository",
]
