"""Cursor-paginated fetch of processor transactions for a date window."""

import logging
from datetime import UTC, date, datetime, time, timedelta

from payback.core.config import settings
from payback.services.processor.base import CreatedRange, ProcessorClient, Transaction
from payback.services.processor.errors import ProcessorUnavailable

logger = logging.getLogger(__name__)


def resolve_window(
    start_date: date | None,
    end_date: date | None,
    now: datetime | None = None,
    lookback_days: int | None = None,
) -> CreatedRange:
    """Translate inclusive calendar dates into an epoch-second creation window.

    ``start_date`` begins at 00:00:00 UTC and ``end_date`` ends at 23:59:59 UTC.
    With neither bound the window is the last ``lookback_days`` days up to now.
    """
    if start_date is None and end_date is None:
        now = now or datetime.now(UTC)
        days = settings.DEFAULT_LOOKBACK_DAYS if lookback_days is None else lookback_days
        return CreatedRange(gte=int((now - timedelta(days=days)).timestamp()))

    gte = lte = None
    if start_date is not None:
        gte = int(datetime.combine(start_date, time.min, tzinfo=UTC).timestamp())
    if end_date is not None:
        lte = int(datetime.combine(end_date, time(23, 59, 59), tzinfo=UTC).timestamp())
    return CreatedRange(gte=gte, lte=lte)


def fetch_all_transactions(
    client: ProcessorClient,
    created: CreatedRange,
    page_size: int | None = None,
) -> list[Transaction]:
    """Follow the list cursor until the processor reports no more pages.

    Pages are requested strictly in order and concatenated as they arrive.
    Any page failure propagates and the pages already fetched are dropped.
    """
    page_size = page_size or settings.PROCESSOR_PAGE_SIZE
    transactions: list[Transaction] = []
    cursor: str | None = None
    pages = 0

    while True:
        page = client.list_transactions(created, cursor=cursor, page_size=page_size)
        pages += 1
        transactions.extend(page.items)
        if not page.has_more:
            break
        if not page.next_cursor or page.next_cursor == cursor:
            raise ProcessorUnavailable("Processor returned more pages without a new cursor")
        cursor = page.next_cursor

    logger.info("Fetched %d transactions in %d page(s)", len(transactions), pages)
    return transactions
