"""Schemas for the grouped failed-transaction listing."""

from datetime import date, datetime

from pydantic import BaseModel, model_validator


class DateRangeQuery(BaseModel):
    """Inclusive calendar-date window; both bounds optional."""

    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_order(self) -> "DateRangeQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class FailedTransactionResponse(BaseModel):
    id: str
    status: str
    amount: int
    currency: str
    created: int


class CustomerFailureGroupResponse(BaseModel):
    customer_id: str
    currency: str
    email: str
    country: str
    payment_methods_count: int
    failed_count: int
    total_amount: int
    latest_date: datetime
    latest_transaction_id: str
    transactions: list[FailedTransactionResponse]


class FailedTransactionsResponse(BaseModel):
    groups: list[CustomerFailureGroupResponse]
    total_groups: int
    total_failed: int
    total_scanned: int
