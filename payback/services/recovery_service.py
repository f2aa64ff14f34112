"""Entry points of the failed-payment recovery engine."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from payback.services.customer_enrichment import CustomerEnricher
from payback.services.failure_grouping import (
    CustomerFailureGroup,
    group_failed_transactions,
    is_failed,
)
from payback.services.payment_retry import PaymentRetryOrchestrator, RetryOutcome
from payback.services.processor.base import ProcessorClient
from payback.services.processor.errors import ProcessorError
from payback.services.recovery_ledger import RecoveryLedger
from payback.services.transaction_fetcher import fetch_all_transactions, resolve_window

logger = logging.getLogger(__name__)

RETRY_IN_PROGRESS_MESSAGE = "A retry for this charge is already in progress"


@dataclass
class FailedTransactionsReport:
    groups: list[CustomerFailureGroup]
    total_scanned: int
    total_failed: int

    @property
    def total_groups(self) -> int:
        return len(self.groups)


@dataclass(frozen=True)
class RetryTarget:
    reference_charge_id: str
    customer_id: str


class RecoveryService:
    """Fetch, group and enrich failed payments, and retry them, for one user."""

    def __init__(self, db: Session, user_id: UUID, client: ProcessorClient):
        self.db = db
        self.user_id = user_id
        self.client = client

    async def list_failed_transactions(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> FailedTransactionsReport:
        window = resolve_window(start_date, end_date)
        transactions = await asyncio.to_thread(fetch_all_transactions, self.client, window)

        total_failed = sum(1 for t in transactions if is_failed(t))
        groups = group_failed_transactions(transactions)
        groups = await CustomerEnricher(self.client).enrich(groups)

        logger.info(
            "User %s: %d failed of %d transactions in %d group(s)",
            self.user_id,
            total_failed,
            len(transactions),
            len(groups),
        )
        return FailedTransactionsReport(
            groups=groups,
            total_scanned=len(transactions),
            total_failed=total_failed,
        )

    def _orchestrator(self) -> PaymentRetryOrchestrator:
        return PaymentRetryOrchestrator(self.client, RecoveryLedger(self.db, self.user_id))

    async def retry_payment(
        self,
        reference_charge_id: str,
        customer_id: str,
        idempotency_seed: str | None = None,
    ) -> RetryOutcome:
        return await self._orchestrator().retry(
            reference_charge_id,
            customer_id,
            idempotency_seed=idempotency_seed,
        )

    async def retry_many(
        self,
        targets: list[RetryTarget],
        idempotency_seed: str | None = None,
    ) -> list[RetryOutcome]:
        """Retry several charges one after another, in the given order.

        ``in_flight`` holds the targets of this request only; a target listed
        twice is answered without a second charge attempt. Processor errors
        are reported on the failing item and do not stop the batch.
        """
        orchestrator = self._orchestrator()
        in_flight: set[RetryTarget] = set()
        outcomes: list[RetryOutcome] = []
        for target in targets:
            if target in in_flight:
                outcomes.append(
                    RetryOutcome(
                        reference_charge_id=target.reference_charge_id,
                        customer_id=target.customer_id,
                        success=False,
                        message=RETRY_IN_PROGRESS_MESSAGE,
                    )
                )
                continue
            in_flight.add(target)
            try:
                outcome = await orchestrator.retry(
                    target.reference_charge_id,
                    target.customer_id,
                    idempotency_seed=idempotency_seed,
                )
            except ProcessorError as e:
                logger.warning("Batch retry of %s failed: %s", target.reference_charge_id, e.message)
                outcome = RetryOutcome(
                    reference_charge_id=target.reference_charge_id,
                    customer_id=target.customer_id,
                    success=False,
                    message=e.message,
                )
            outcomes.append(outcome)
        return outcomes
