"""Payment retry schemas."""

from pydantic import BaseModel, Field


class RetryRequest(BaseModel):
    reference_charge_id: str = Field(..., min_length=1, max_length=255)
    customer_id: str = Field(..., min_length=1, max_length=255)


class RetryBatchRequest(BaseModel):
    items: list[RetryRequest] = Field(..., min_length=1, max_length=50)


class RetryAttemptResponse(BaseModel):
    payment_method_id: str
    brand: str | None = None
    last4: str | None = None
    success: bool
    status: str
    error: str | None = None
    charge_id: str | None = None


class RetryResponse(BaseModel):
    reference_charge_id: str
    customer_id: str
    success: bool
    message: str
    attempts: list[RetryAttemptResponse]
    new_charge_id: str | None = None
    recovery_id: str | None = None


class RetryBatchResponse(BaseModel):
    results: list[RetryResponse]
    succeeded: int
    failed: int
