"""Exactly-once persistence of successful recoveries."""

import logging
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from payback.models.recovery import RecoveryRecord
from payback.repositories.recovery_repository import RecoveryRepository
from payback.schemas.recovery import RecoveryCreate
from payback.services.processor.base import ChargeResult, PaymentMethodRecord, Transaction

logger = logging.getLogger(__name__)


class RecoveryLedger:
    """Records the winning retry charge for one user.

    The charge has already been taken when ``record`` runs, so storage
    problems are logged and swallowed instead of being reported as a payment
    failure. A duplicate (user, charge) pair returns the stored row.
    """

    def __init__(self, db: Session, user_id: UUID):
        self.db = db
        self.user_id = user_id
        self.repo = RecoveryRepository(db)

    def record(
        self,
        charge: ChargeResult,
        reference: Transaction,
        customer_id: str,
        payment_method: PaymentMethodRecord,
        customer_email: str | None = None,
    ) -> RecoveryRecord | None:
        try:
            data = RecoveryCreate(
                payment_intent_id=charge.id,
                original_payment_intent_id=reference.id,
                customer_id=customer_id,
                customer_email=customer_email or "",
                amount=charge.amount or reference.amount,
                currency=charge.currency or reference.currency,
                payment_method_id=payment_method.id,
                payment_method_brand=payment_method.brand,
                payment_method_last4=payment_method.last4,
                original_failed_at=reference.created_at,
            )
            record, created = self.repo.create_once(data, self.user_id)
        except (ValidationError, SQLAlchemyError):
            self.db.rollback()
            logger.exception("Failed to record recovery %s for user %s", charge.id, self.user_id)
            return None

        if created:
            logger.info(
                "Recorded recovery %s (%d %s) for customer %s",
                charge.id,
                data.amount,
                data.currency,
                customer_id,
            )
        else:
            logger.warning("Recovery %s already recorded for user %s", charge.id, self.user_id)
        return record
