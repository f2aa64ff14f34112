"""Classify failed transactions and group them per customer and currency."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from payback.services.processor.base import FAILED_STATUSES, Transaction

NO_EMAIL = "No email"
UNKNOWN_COUNTRY = "Unknown"
EMAIL_LOAD_ERROR = "Error loading"


def is_failed(transaction: Transaction) -> bool:
    return transaction.status in FAILED_STATUSES


@dataclass
class CustomerFailureGroup:
    """Failed transactions of one customer in one currency.

    Aggregates are maintained by ``add`` so that ``failed_count``,
    ``total_amount`` and ``latest_date`` always agree with ``transactions``.
    """

    customer_id: str
    currency: str
    transactions: list[Transaction] = field(default_factory=list)
    total_amount: int = 0
    failed_count: int = 0
    latest_date: int = 0
    email: str = NO_EMAIL
    country: str = UNKNOWN_COUNTRY
    payment_methods_count: int = 0

    def add(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)
        self.total_amount += transaction.amount
        self.failed_count += 1
        self.latest_date = max(self.latest_date, transaction.created)

    @property
    def latest_transaction(self) -> Transaction:
        return max(self.transactions, key=lambda t: t.created)

    @property
    def latest_at(self) -> datetime:
        return datetime.fromtimestamp(self.latest_date, tz=UTC)


def group_failed_transactions(transactions: Iterable[Transaction]) -> list[CustomerFailureGroup]:
    """Group failed transactions by (customer, currency), most recent first.

    Transactions without a customer are dropped since they cannot be retried.
    """
    groups: dict[tuple[str, str], CustomerFailureGroup] = {}
    for transaction in transactions:
        if not is_failed(transaction) or not transaction.customer_id:
            continue
        key = (transaction.customer_id, transaction.currency)
        group = groups.get(key)
        if group is None:
            group = groups[key] = CustomerFailureGroup(
                customer_id=transaction.customer_id,
                currency=transaction.currency,
            )
        group.add(transaction)

    for group in groups.values():
        group.transactions.sort(key=lambda t: t.created, reverse=True)

    return sorted(
        groups.values(),
        key=lambda g: (-g.latest_date, g.customer_id, g.currency),
    )
