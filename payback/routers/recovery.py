"""Payment recovery API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from payback.core.auth import get_current_user_id, get_processor_client
from payback.core.config import settings
from payback.core.database import get_db
from payback.core.http_errors import processor_http_exception
from payback.core.idempotency import (
    IdempotencyResult,
    check_idempotency,
    record_idempotency_response,
)
from payback.core.rate_limiter import RateLimiter
from payback.schemas.retry import (
    RetryAttemptResponse,
    RetryBatchRequest,
    RetryBatchResponse,
    RetryRequest,
    RetryResponse,
)
from payback.services.payment_retry import RetryOutcome
from payback.services.processor.base import ProcessorClient
from payback.services.processor.errors import ProcessorError
from payback.services.recovery_service import RecoveryService, RetryTarget

logger = logging.getLogger(__name__)

router = APIRouter()

# Module-level rate limiter instance for charge retries
retry_rate_limiter = RateLimiter(
    max_requests=settings.RATE_LIMIT_RETRIES_PER_MINUTE,
    window_seconds=60,
)


def _check_rate_limit(user_id: UUID = Depends(get_current_user_id)) -> UUID:
    """Dependency that enforces the retry rate limit per user."""
    key = str(user_id)
    if not retry_rate_limiter.is_allowed(key):
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded. Maximum "
            f"{settings.RATE_LIMIT_RETRIES_PER_MINUTE} retries per minute.",
            headers={"Retry-After": str(retry_rate_limiter.retry_after(key))},
        )
    return user_id


def _retry_response(outcome: RetryOutcome) -> RetryResponse:
    return RetryResponse(
        reference_charge_id=outcome.reference_charge_id,
        customer_id=outcome.customer_id,
        success=outcome.success,
        message=outcome.message,
        attempts=[
            RetryAttemptResponse(
                payment_method_id=a.payment_method_id,
                brand=a.brand,
                last4=a.last4,
                success=a.success,
                status=a.status,
                error=a.error,
                charge_id=a.charge_id,
            )
            for a in outcome.attempts
        ],
        new_charge_id=outcome.new_charge_id,
        recovery_id=str(outcome.recovery.id) if outcome.recovery is not None else None,
    )


@router.post(
    "/retry",
    response_model=RetryResponse,
    summary="Retry a failed charge",
    responses={
        400: {"description": "Processor credential not configured"},
        401: {"description": "Unauthorized – invalid or missing token"},
        402: {"description": "Payment processor rejected the request"},
        404: {"description": "Reference charge or customer not found"},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "Payment processor unavailable"},
    },
)
async def retry_payment(
    data: RetryRequest,
    request: Request,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(_check_rate_limit),
    client: ProcessorClient = Depends(get_processor_client),
) -> RetryResponse | JSONResponse:
    """Charge the customer's saved payment methods in order until one succeeds.

    An ``Idempotency-Key`` header replays the stored response of a completed
    request and makes processor-side charges of a repeated request collapse
    into the original ones.
    """
    idempotency = check_idempotency(request, db, user_id)
    if isinstance(idempotency, JSONResponse):
        return idempotency
    seed = idempotency.key if isinstance(idempotency, IdempotencyResult) else None

    service = RecoveryService(db, user_id, client)
    try:
        outcome = await service.retry_payment(
            data.reference_charge_id,
            data.customer_id,
            idempotency_seed=seed,
        )
    except ProcessorError as e:
        raise processor_http_exception(e) from None

    response = _retry_response(outcome)
    if isinstance(idempotency, IdempotencyResult):
        record_idempotency_response(
            db, user_id, idempotency.key, 200, response.model_dump(mode="json")
        )
    return response


@router.post(
    "/retry_batch",
    response_model=RetryBatchResponse,
    summary="Retry several failed charges",
    responses={
        400: {"description": "Processor credential not configured"},
        401: {"description": "Unauthorized – invalid or missing token"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def retry_payment_batch(
    data: RetryBatchRequest,
    request: Request,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(_check_rate_limit),
    client: ProcessorClient = Depends(get_processor_client),
) -> RetryBatchResponse | JSONResponse:
    """Retry each item in request order; one result per item.

    Items repeating an earlier item of the same batch are not charged again.
    """
    idempotency = check_idempotency(request, db, user_id)
    if isinstance(idempotency, JSONResponse):
        return idempotency
    seed = idempotency.key if isinstance(idempotency, IdempotencyResult) else None

    targets = [
        RetryTarget(reference_charge_id=item.reference_charge_id, customer_id=item.customer_id)
        for item in data.items
    ]
    service = RecoveryService(db, user_id, client)
    outcomes = await service.retry_many(targets, idempotency_seed=seed)

    results = [_retry_response(o) for o in outcomes]
    succeeded = sum(1 for r in results if r.success)
    logger.info("User %s batch retry: %d of %d succeeded", user_id, succeeded, len(results))
    response = RetryBatchResponse(
        results=results,
        succeeded=succeeded,
        failed=len(results) - succeeded,
    )
    if isinstance(idempotency, IdempotencyResult):
        record_idempotency_response(
            db, user_id, idempotency.key, 200, response.model_dump(mode="json")
        )
    return response
