from payback.services.processor.base import (
    FAILED_STATUSES,
    ChargeResult,
    CreatedRange,
    CustomerProfile,
    PaymentMethodRecord,
    ProcessorClient,
    Transaction,
    TransactionPage,
    TransactionStatus,
)
from payback.services.processor.errors import (
    CredentialMissing,
    NotFound,
    ProcessorError,
    ProcessorRejected,
    ProcessorUnavailable,
)
from payback.services.processor.stripe_client import StripeProcessorClient

__all__ = [
    "FAILED_STATUSES",
    "ChargeResult",
    "CreatedRange",
    "CredentialMissing",
    "CustomerProfile",
    "NotFound",
    "PaymentMethodRecord",
    "ProcessorClient",
    "ProcessorError",
    "ProcessorRejected",
    "ProcessorUnavailable",
    "StripeProcessorClient",
    "Transaction",
    "TransactionPage",
    "TransactionStatus",
]
