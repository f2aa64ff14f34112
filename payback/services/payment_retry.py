"""Retry a failed payment across a customer's saved payment methods."""

import asyncio
import logging
from dataclasses import dataclass, field

from payback.core.idempotency import processor_idempotency_key
from payback.models.recovery import RecoveryRecord
from payback.services.processor.base import (
    FAILED_STATUSES,
    ChargeResult,
    PaymentMethodRecord,
    ProcessorClient,
    Transaction,
)
from payback.services.processor.errors import ProcessorError
from payback.services.recovery_ledger import RecoveryLedger

logger = logging.getLogger(__name__)

NO_PAYMENT_METHODS_MESSAGE = "No payment methods found for this customer"


@dataclass
class RetryAttempt:
    payment_method_id: str
    brand: str | None
    last4: str | None
    success: bool
    status: str
    error: str | None = None
    charge_id: str | None = None


@dataclass
class RetryOutcome:
    reference_charge_id: str
    customer_id: str
    success: bool
    message: str
    attempts: list[RetryAttempt] = field(default_factory=list)
    new_charge_id: str | None = None
    recovery: RecoveryRecord | None = None


def _describe(method: PaymentMethodRecord) -> str:
    return f"{method.brand or 'card'} ending in {method.last4 or '????'}"


class PaymentRetryOrchestrator:
    """Charge a customer's payment methods one by one until one succeeds.

    Methods are tried in the order the processor lists them and strictly one
    after another. Declines and processor errors are recorded per method and
    do not stop the loop; the first success stops it and is written to the
    ledger.
    """

    def __init__(self, client: ProcessorClient, ledger: RecoveryLedger | None = None):
        self.client = client
        self.ledger = ledger

    async def retry(
        self,
        reference_charge_id: str,
        customer_id: str,
        idempotency_seed: str | None = None,
    ) -> RetryOutcome:
        methods = await asyncio.to_thread(self.client.list_payment_methods, customer_id)
        if not methods:
            return RetryOutcome(
                reference_charge_id=reference_charge_id,
                customer_id=customer_id,
                success=False,
                message=NO_PAYMENT_METHODS_MESSAGE,
            )

        # NotFound here aborts the whole retry
        reference = await asyncio.to_thread(self.client.get_transaction, reference_charge_id)
        if reference.status not in FAILED_STATUSES:
            return RetryOutcome(
                reference_charge_id=reference_charge_id,
                customer_id=customer_id,
                success=False,
                message=f"Charge {reference_charge_id} is not in a failed state ({reference.status.value})",
            )

        attempts: list[RetryAttempt] = []
        for number, method in enumerate(methods, start=1):
            attempt, charge = await self._attempt(reference, customer_id, method, number, idempotency_seed)
            attempts.append(attempt)
            if charge is None or not charge.succeeded:
                continue

            recovery = await self._record(charge, reference, customer_id, method)
            return RetryOutcome(
                reference_charge_id=reference_charge_id,
                customer_id=customer_id,
                success=True,
                message=f"Payment succeeded with {_describe(method)}",
                attempts=attempts,
                new_charge_id=charge.id,
                recovery=recovery,
            )

        return RetryOutcome(
            reference_charge_id=reference_charge_id,
            customer_id=customer_id,
            success=False,
            message=f"All {len(methods)} payment methods failed",
            attempts=attempts,
        )

    async def _attempt(
        self,
        reference: Transaction,
        customer_id: str,
        method: PaymentMethodRecord,
        number: int,
        idempotency_seed: str | None,
    ) -> tuple[RetryAttempt, ChargeResult | None]:
        metadata = {
            "recovery_of": reference.id,
            "recovery_attempt": str(number),
        }
        idempotency_key = (
            processor_idempotency_key(idempotency_seed, reference.id, method.id) if idempotency_seed else None
        )
        try:
            charge = await asyncio.to_thread(
                self.client.create_and_confirm_charge,
                reference.amount,
                reference.currency,
                customer_id,
                method.id,
                metadata,
                idempotency_key,
            )
        except ProcessorError as e:
            logger.warning("Retry of %s with %s failed: %s", reference.id, method.id, e.message)
            failed = RetryAttempt(
                payment_method_id=method.id,
                brand=method.brand,
                last4=method.last4,
                success=False,
                status="failed",
                error=e.message,
            )
            return failed, None

        error = None
        if not charge.succeeded:
            error = charge.failure_message or f"Payment {charge.status}"
            logger.warning("Retry of %s with %s ended as %s", reference.id, method.id, charge.status)
        else:
            logger.info("Retry of %s with %s succeeded as %s", reference.id, method.id, charge.id)

        attempt = RetryAttempt(
            payment_method_id=method.id,
            brand=method.brand,
            last4=method.last4,
            success=charge.succeeded,
            status=charge.status,
            error=error,
            charge_id=charge.id,
        )
        return attempt, charge

    async def _record(
        self,
        charge: ChargeResult,
        reference: Transaction,
        customer_id: str,
        method: PaymentMethodRecord,
    ) -> RecoveryRecord | None:
        if self.ledger is None:
            return None
        try:
            profile = await asyncio.to_thread(self.client.get_customer, customer_id)
            email = profile.email
        except ProcessorError as e:
            logger.warning("Could not load email for customer %s: %s", customer_id, e.message)
            email = None
        return self.ledger.record(charge, reference, customer_id, method, customer_email=email)
