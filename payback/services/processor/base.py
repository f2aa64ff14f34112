"""Typed processor records and the adapter interface.

Responses from the processor are loosely structured; adapters convert them
into the frozen dataclasses below before anything else sees them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum


class TransactionStatus(str, Enum):
    """Processor transaction status, collapsed to the values we act on."""

    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    FAILED = "failed"
    CANCELED = "canceled"
    SUCCEEDED = "succeeded"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> "TransactionStatus":
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


FAILED_STATUSES = frozenset(
    {
        TransactionStatus.REQUIRES_PAYMENT_METHOD,
        TransactionStatus.FAILED,
        TransactionStatus.CANCELED,
    }
)


@dataclass(frozen=True)
class Transaction:
    """Snapshot of one processor payment attempt."""

    id: str
    status: TransactionStatus
    amount: int  # minor currency units
    currency: str  # uppercase ISO code
    created: int  # seconds since epoch
    customer_id: str | None = None

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.created, tz=UTC)


@dataclass(frozen=True)
class TransactionPage:
    items: list[Transaction]
    has_more: bool
    next_cursor: str | None = None


@dataclass(frozen=True)
class CreatedRange:
    """Inclusive creation-time window in epoch seconds; ``None`` means open."""

    gte: int | None = None
    lte: int | None = None

    def as_params(self) -> dict[str, int]:
        params: dict[str, int] = {}
        if self.gte is not None:
            params["gte"] = self.gte
        if self.lte is not None:
            params["lte"] = self.lte
        return params


@dataclass(frozen=True)
class CustomerProfile:
    id: str
    email: str | None = None
    country: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class PaymentMethodRecord:
    id: str
    brand: str | None = None
    last4: str | None = None


@dataclass(frozen=True)
class ChargeResult:
    """Outcome of creating and confirming a new charge."""

    id: str
    status: str
    amount: int
    currency: str
    failure_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == TransactionStatus.SUCCEEDED.value


class ProcessorClient(ABC):
    """Payment processor operations used by the recovery engine.

    An instance is bound to exactly one user's credential. All methods block
    for a network round trip and raise ``ProcessorError`` subclasses.
    """

    @abstractmethod
    def list_transactions(
        self,
        created: CreatedRange,
        cursor: str | None = None,
        page_size: int = 100,
    ) -> TransactionPage:
        """Return one page of transactions created inside ``created``."""
        ...  # pragma: no cover

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Transaction:
        """Retrieve a single transaction."""
        ...  # pragma: no cover

    @abstractmethod
    def get_customer(self, customer_id: str) -> CustomerProfile:
        """Retrieve a customer profile; raises ``NotFound`` for unknown ids."""
        ...  # pragma: no cover

    @abstractmethod
    def list_payment_methods(self, customer_id: str) -> list[PaymentMethodRecord]:
        """List the customer's card payment methods in processor order."""
        ...  # pragma: no cover

    @abstractmethod
    def create_and_confirm_charge(
        self,
        amount: int,
        currency: str,
        customer_id: str,
        payment_method_id: str,
        metadata: dict[str, str] | None = None,
        idempotency_key: str | None = None,
    ) -> ChargeResult:
        """Create a new charge against ``payment_method_id`` and confirm it."""
        ...  # pragma: no cover
