from payback.schemas.credential import CredentialStatusResponse, CredentialUpdate
from payback.schemas.failed_transaction import (
    CustomerFailureGroupResponse,
    DateRangeQuery,
    FailedTransactionResponse,
    FailedTransactionsResponse,
)
from payback.schemas.recovery import (
    CurrencyTotalResponse,
    LastRecoveryResponse,
    MonthlyRecoveryPoint,
    MonthlyRecoveryResponse,
    RecoveryCreate,
    RecoveryResponse,
    RecoverySummaryResponse,
)
from payback.schemas.retry import (
    RetryAttemptResponse,
    RetryBatchRequest,
    RetryBatchResponse,
    RetryRequest,
    RetryResponse,
)

__all__ = [
    "CredentialStatusResponse",
    "CredentialUpdate",
    "CurrencyTotalResponse",
    "CustomerFailureGroupResponse",
    "DateRangeQuery",
    "FailedTransactionResponse",
    "FailedTransactionsResponse",
    "LastRecoveryResponse",
    "MonthlyRecoveryPoint",
    "MonthlyRecoveryResponse",
    "RecoveryCreate",
    "RecoveryResponse",
    "RecoverySummaryResponse",
    "RetryAttemptResponse",
    "RetryBatchRequest",
    "RetryBatchResponse",
    "RetryRequest",
    "RetryResponse",
]
