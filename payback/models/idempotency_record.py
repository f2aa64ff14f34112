"""IdempotencyRecord model for replaying responses of retried requests."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint, func

from payback.core.database import Base
from payback.models.shared import UUIDType, generate_uuid


class IdempotencyRecord(Base):
    """Stores the response of a request sent with an ``Idempotency-Key``."""

    __tablename__ = "idempotency_records"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_user_idempotency_key"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDType, nullable=False, index=True)
    idempotency_key = Column(String(255), nullable=False, index=True)
    request_method = Column(String(10), nullable=False)
    request_path = Column(String(500), nullable=False)
    response_status = Column(Integer, nullable=True)
    response_body = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
