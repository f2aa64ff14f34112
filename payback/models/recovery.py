"""RecoveryRecord model - ledger of payments recovered by a retry."""

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint, func

from payback.core.database import Base
from payback.models.shared import UUIDType, generate_uuid, utc_now


class RecoveryRecord(Base):
    """A successful retry charge, written once and never mutated.

    ``payment_intent_id`` is the new charge that succeeded; the failed charge
    it resolves is kept in ``original_payment_intent_id``.
    """

    __tablename__ = "recoveries"
    __table_args__ = (
        UniqueConstraint("user_id", "payment_intent_id", name="uq_recoveries_user_payment_intent"),
        Index("ix_recoveries_user_recovered_at", "user_id", "recovered_at"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDType, nullable=False, index=True)

    # Processor references
    payment_intent_id = Column(String(255), nullable=False, index=True)
    original_payment_intent_id = Column(String(255), nullable=True, index=True)
    customer_id = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False, default="")

    # Amount in minor currency units
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    # Payment method that succeeded
    payment_method_id = Column(String(255), nullable=False, default="")
    payment_method_brand = Column(String(50), nullable=True)
    payment_method_last4 = Column(String(4), nullable=True)

    recovered_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    original_failed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
