"""Read-only statistics over a user's recovery ledger."""

from datetime import UTC, date, datetime, time
from uuid import UUID

from sqlalchemy.orm import Session

from payback.models.recovery import RecoveryRecord
from payback.repositories.recovery_repository import RecoveryRepository
from payback.schemas.recovery import (
    CurrencyTotalResponse,
    LastRecoveryResponse,
    MonthlyRecoveryPoint,
    MonthlyRecoveryResponse,
    RecoverySummaryResponse,
)

DEFAULT_CURRENCY = "USD"


def _day_bounds(
    start_date: date | None, end_date: date | None
) -> tuple[datetime | None, datetime | None]:
    start = datetime.combine(start_date, time.min, tzinfo=UTC) if start_date else None
    end = datetime.combine(end_date, time.max, tzinfo=UTC) if end_date else None
    return start, end


class RecoveryStatsService:
    def __init__(self, db: Session, user_id: UUID):
        self.user_id = user_id
        self.repo = RecoveryRepository(db)

    def recent(self, limit: int = 10) -> list[RecoveryRecord]:
        return self.repo.get_recent(self.user_id, limit=limit)

    def summary(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> RecoverySummaryResponse:
        """Totals per currency plus the average for the main currency.

        The main currency is the one with the most recoveries.
        """
        start, end = _day_bounds(start_date, end_date)
        totals = self.repo.totals_by_currency(self.user_id, start, end)
        latest = self.repo.get_latest(self.user_id, start, end)

        main = totals[0] if totals else None
        average = main.total_amount / main.count if main and main.count else 0.0

        return RecoverySummaryResponse(
            totals_by_currency=[
                CurrencyTotalResponse(
                    currency=t.currency, total_amount=t.total_amount, count=t.count
                )
                for t in totals
            ],
            total_recoveries=sum(t.count for t in totals),
            main_currency=main.currency if main else DEFAULT_CURRENCY,
            average_amount=average,
            last_recovery=LastRecoveryResponse(
                amount=int(latest.amount),
                currency=str(latest.currency),
                recovered_at=latest.recovered_at,  # type: ignore[arg-type]
                customer_email=str(latest.customer_email or ""),
            )
            if latest
            else None,
        )

    def by_month(
        self,
        currency: str = DEFAULT_CURRENCY,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> MonthlyRecoveryResponse:
        currency = currency.upper()
        start, end = _day_bounds(start_date, end_date)
        rows = self.repo.monthly_totals(self.user_id, currency, start, end)
        data = []
        for row in rows:
            year, month = row.month.split("-")
            data.append(
                MonthlyRecoveryPoint(
                    month=row.month,
                    year=int(year),
                    month_number=int(month),
                    amount_cents=row.total_amount,
                    count=row.count,
                    currency=currency,
                )
            )
        return MonthlyRecoveryResponse(currency=currency, data=data)
