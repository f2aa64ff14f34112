"""Failed transactions API endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from payback.core.auth import get_current_user_id, get_processor_client
from payback.core.database import get_db
from payback.core.http_errors import processor_http_exception
from payback.schemas.failed_transaction import (
    CustomerFailureGroupResponse,
    DateRangeQuery,
    FailedTransactionResponse,
    FailedTransactionsResponse,
)
from payback.services.failure_grouping import CustomerFailureGroup
from payback.services.processor.base import ProcessorClient
from payback.services.processor.errors import ProcessorError
from payback.services.recovery_service import RecoveryService

router = APIRouter()


def _group_response(group: CustomerFailureGroup) -> CustomerFailureGroupResponse:
    return CustomerFailureGroupResponse(
        customer_id=group.customer_id,
        currency=group.currency,
        email=group.email,
        country=group.country,
        payment_methods_count=group.payment_methods_count,
        failed_count=group.failed_count,
        total_amount=group.total_amount,
        latest_date=group.latest_at,
        latest_transaction_id=group.latest_transaction.id,
        transactions=[
            FailedTransactionResponse(
                id=t.id,
                status=t.status.value,
                amount=t.amount,
                currency=t.currency,
                created=t.created,
            )
            for t in group.transactions
        ],
    )


@router.get(
    "/",
    response_model=FailedTransactionsResponse,
    summary="List failed transactions grouped by customer",
    responses={
        400: {"description": "Processor credential not configured"},
        401: {"description": "Unauthorized – invalid or missing token"},
        422: {"description": "start_date is after end_date"},
        502: {"description": "Payment processor unavailable"},
    },
)
async def list_failed_transactions(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
    client: ProcessorClient = Depends(get_processor_client),
) -> FailedTransactionsResponse:
    """Scan the processor for failed payments in the window and group them.

    Without dates the last few days are scanned; dates are inclusive UTC days.
    """
    try:
        window = DateRangeQuery(start_date=start_date, end_date=end_date)
    except ValidationError:
        raise HTTPException(
            status_code=422, detail="start_date must be on or before end_date"
        ) from None

    service = RecoveryService(db, user_id, client)
    try:
        report = await service.list_failed_transactions(window.start_date, window.end_date)
    except ProcessorError as e:
        raise processor_http_exception(e) from None

    return FailedTransactionsResponse(
        groups=[_group_response(g) for g in report.groups],
        total_groups=report.total_groups,
        total_failed=report.total_failed,
        total_scanned=report.total_scanned,
    )
