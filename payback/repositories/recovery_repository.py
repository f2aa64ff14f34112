"""Repository for the recovery ledger."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import func as sa_func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from payback.models.recovery import RecoveryRecord
from payback.schemas.recovery import RecoveryCreate


@dataclass
class CurrencyTotal:
    currency: str
    total_amount: int
    count: int


@dataclass
class MonthlyRecovery:
    month: str  # YYYY-MM
    total_amount: int
    count: int


class RecoveryRepository:
    def __init__(self, db: Session):
        self.db = db

    def _scoped(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(RecoveryRecord).filter(RecoveryRecord.user_id == user_id)
        if start is not None:
            query = query.filter(RecoveryRecord.recovered_at >= start)
        if end is not None:
            query = query.filter(RecoveryRecord.recovered_at <= end)
        return query

    def get_by_payment_intent(self, user_id: UUID, payment_intent_id: str) -> RecoveryRecord | None:
        return (
            self.db.query(RecoveryRecord)
            .filter(
                RecoveryRecord.user_id == user_id,
                RecoveryRecord.payment_intent_id == payment_intent_id,
            )
            .first()
        )

    def create_once(self, data: RecoveryCreate, user_id: UUID) -> tuple[RecoveryRecord, bool]:
        """Insert a recovery unless (user, payment intent) is already recorded.

        The unique constraint decides; a losing concurrent insert rolls back and
        returns the stored row. Returns ``(record, created)``.
        """
        record = RecoveryRecord(user_id=user_id, **data.model_dump(exclude_none=True))
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_payment_intent(user_id, data.payment_intent_id)
            if existing is None:
                raise
            return existing, False
        self.db.refresh(record)
        return record, True

    def get_recent(self, user_id: UUID, limit: int = 10) -> list[RecoveryRecord]:
        return (
            self._scoped(user_id)
            .order_by(RecoveryRecord.recovered_at.desc())
            .limit(limit)
            .all()
        )

    def get_latest(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> RecoveryRecord | None:
        return self._scoped(user_id, start, end).order_by(RecoveryRecord.recovered_at.desc()).first()

    def totals_by_currency(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[CurrencyTotal]:
        """Sum and count of recovered amounts per currency, most recoveries first."""
        query = self.db.query(
            RecoveryRecord.currency,
            sa_func.coalesce(sa_func.sum(RecoveryRecord.amount), 0).label("total"),
            sa_func.count(RecoveryRecord.id).label("count"),
        ).filter(RecoveryRecord.user_id == user_id)
        if start is not None:
            query = query.filter(RecoveryRecord.recovered_at >= start)
        if end is not None:
            query = query.filter(RecoveryRecord.recovered_at <= end)
        rows = query.group_by(RecoveryRecord.currency).all()

        totals = [
            CurrencyTotal(currency=row.currency, total_amount=int(row.total), count=int(row.count))
            for row in rows
        ]
        totals.sort(key=lambda t: (-t.count, t.currency))
        return totals

    def monthly_totals(
        self,
        user_id: UUID,
        currency: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MonthlyRecovery]:
        """Recovered amount per calendar month for one currency, oldest first."""
        # Build a year-month expression compatible with both SQLite and PostgreSQL
        dialect = self.db.bind.dialect.name if self.db.bind else ""
        if dialect == "postgresql":
            month_expr = sa_func.to_char(RecoveryRecord.recovered_at, "YYYY-MM")
        else:
            month_expr = sa_func.strftime("%Y-%m", RecoveryRecord.recovered_at)

        query = self.db.query(
            month_expr.label("month"),
            sa_func.coalesce(sa_func.sum(RecoveryRecord.amount), 0).label("total"),
            sa_func.count(RecoveryRecord.id).label("count"),
        ).filter(
            RecoveryRecord.user_id == user_id,
            RecoveryRecord.currency == currency.upper(),
        )
        if start is not None:
            query = query.filter(RecoveryRecord.recovered_at >= start)
        if end is not None:
            query = query.filter(RecoveryRecord.recovered_at <= end)
        rows = query.group_by(month_expr).order_by(month_expr).all()

        return [
            MonthlyRecovery(month=row.month, total_amount=int(row.total), count=int(row.count))
            for row in rows
        ]
