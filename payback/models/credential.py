"""ProcessorCredential model - one payment processor secret per user."""

from sqlalchemy import Column, DateTime, String, func

from payback.core.database import Base
from payback.models.shared import UUIDType, generate_uuid


class ProcessorCredential(Base):
    __tablename__ = "processor_credentials"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDType, nullable=False, unique=True, index=True)
    secret_key = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def key_hint(self) -> str:
        """Masked form of the key that is safe to display or log."""
        key = str(self.secret_key)
        prefix = key.split("_", 2)
        head = "_".join(prefix[:2]) + "_" if len(prefix) == 3 else key[:3]
        return f"{head}…{key[-4:]}"
