"""Recovery ledger schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecoveryCreate(BaseModel):
    """Fields of a recovery taken from the winning retry charge."""

    payment_intent_id: str = Field(..., min_length=1, max_length=255)
    original_payment_intent_id: str | None = None
    customer_id: str = Field(..., min_length=1, max_length=255)
    customer_email: str = ""
    amount: int = Field(..., ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_method_id: str = ""
    payment_method_brand: str | None = None
    payment_method_last4: str | None = Field(default=None, max_length=4)
    recovered_at: datetime | None = None
    original_failed_at: datetime | None = None

    @field_validator("currency")
    @classmethod
    def uppercase_currency(cls, value: str) -> str:
        return value.upper()


class RecoveryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    payment_intent_id: str
    original_payment_intent_id: str | None = None
    customer_id: str
    customer_email: str
    amount: int
    currency: str
    payment_method_id: str
    payment_method_brand: str | None = None
    payment_method_last4: str | None = None
    recovered_at: datetime
    original_failed_at: datetime | None = None


class CurrencyTotalResponse(BaseModel):
    currency: str
    total_amount: int
    count: int


class LastRecoveryResponse(BaseModel):
    amount: int
    currency: str
    recovered_at: datetime
    customer_email: str


class RecoverySummaryResponse(BaseModel):
    totals_by_currency: list[CurrencyTotalResponse]
    total_recoveries: int
    main_currency: str
    average_amount: float
    last_recovery: LastRecoveryResponse | None = None


class MonthlyRecoveryPoint(BaseModel):
    month: str
    year: int
    month_number: int
    amount_cents: int
    count: int
    currency: str


class MonthlyRecoveryResponse(BaseModel):
    currency: str
    data: list[MonthlyRecoveryPoint]
