import logging
from typing import Any

from arq import cron

from payback.core.config import settings
from payback.core.database import SessionLocal
from payback.repositories.idempotency_repository import IdempotencyRepository
from payback.tasks import redis_settings

logger = logging.getLogger(__name__)


async def purge_idempotency_records_task(ctx: dict[str, Any]) -> int:
    """Background task: delete idempotency records older than the replay window.

    Runs hourly.
    """
    db = SessionLocal()
    try:
        count = IdempotencyRepository(db).delete_expired(settings.IDEMPOTENCY_TTL_HOURS)
        if count > 0:
            logger.info("Purged %d expired idempotency records", count)
        return count
    finally:
        db.close()


class WorkerSettings:
    functions = [
        purge_idempotency_records_task,
    ]
    cron_jobs = [
        cron(purge_idempotency_records_task, minute={0}),  # hourly
    ]
    redis_settings = redis_settings
