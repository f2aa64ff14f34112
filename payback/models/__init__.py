from payback.models.credential import ProcessorCredential
from payback.models.idempotency_record import IdempotencyRecord
from payback.models.recovery import RecoveryRecord

__all__ = [
    "IdempotencyRecord",
    "ProcessorCredential",
    "RecoveryRecord",
]
