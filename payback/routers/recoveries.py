"""Recovery statistics API endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from payback.core.auth import get_current_user_id
from payback.core.database import get_db
from payback.models.recovery import RecoveryRecord
from payback.schemas.recovery import (
    MonthlyRecoveryResponse,
    RecoveryResponse,
    RecoverySummaryResponse,
)
from payback.services.recovery_stats import RecoveryStatsService

router = APIRouter()


def _check_dates(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be on or before end_date")


@router.get(
    "/",
    response_model=list[RecoveryResponse],
    summary="List recent recoveries",
    responses={401: {"description": "Unauthorized – invalid or missing token"}},
)
async def list_recoveries(
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> list[RecoveryRecord]:
    """Most recent recoveries first."""
    return RecoveryStatsService(db, user_id).recent(limit=limit)


@router.get(
    "/summary",
    response_model=RecoverySummaryResponse,
    summary="Recovery totals",
    responses={401: {"description": "Unauthorized – invalid or missing token"}},
)
async def get_recovery_summary(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> RecoverySummaryResponse:
    _check_dates(start_date, end_date)
    return RecoveryStatsService(db, user_id).summary(start_date, end_date)


@router.get(
    "/by_month",
    response_model=MonthlyRecoveryResponse,
    summary="Recovered amount per month",
    responses={401: {"description": "Unauthorized – invalid or missing token"}},
)
async def get_recoveries_by_month(
    currency: str = Query(default="USD", min_length=3, max_length=3),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> MonthlyRecoveryResponse:
    _check_dates(start_date, end_date)
    return RecoveryStatsService(db, user_id).by_month(currency, start_date, end_date)
