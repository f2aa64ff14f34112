"""Concurrent enrichment of failure groups with customer data."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from payback.core.config import settings
from payback.services.failure_grouping import (
    EMAIL_LOAD_ERROR,
    NO_EMAIL,
    UNKNOWN_COUNTRY,
    CustomerFailureGroup,
)
from payback.services.processor.base import ProcessorClient
from payback.services.processor.errors import ProcessorError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CustomerEnrichment:
    email: str
    country: str
    payment_methods_count: int


LOAD_ERROR_ENRICHMENT = CustomerEnrichment(
    email=EMAIL_LOAD_ERROR,
    country=UNKNOWN_COUNTRY,
    payment_methods_count=0,
)


class CustomerEnricher:
    """Fetch profile and payment methods for many customers at once.

    Every processor call goes through one semaphore, so no more than
    ``max_concurrency`` calls are in flight for the whole batch.
    """

    def __init__(self, client: ProcessorClient, max_concurrency: int | None = None):
        self.client = client
        self._semaphore = asyncio.Semaphore(max_concurrency or settings.PROCESSOR_MAX_CONCURRENCY)

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        async with self._semaphore:
            return await asyncio.to_thread(fn, *args)

    async def enrich_customer(self, customer_id: str) -> CustomerEnrichment:
        try:
            profile, methods = await asyncio.gather(
                self._call(self.client.get_customer, customer_id),
                self._call(self.client.list_payment_methods, customer_id),
            )
        except ProcessorError as e:
            logger.warning("Could not enrich customer %s: %s", customer_id, e.message)
            return LOAD_ERROR_ENRICHMENT

        return CustomerEnrichment(
            email=profile.email or NO_EMAIL,
            country=profile.country or UNKNOWN_COUNTRY,
            payment_methods_count=len(methods),
        )

    async def enrich(self, groups: list[CustomerFailureGroup]) -> list[CustomerFailureGroup]:
        """Fill in email, country and payment method count on each group.

        A customer spread over several currency groups is fetched once.
        """
        customer_ids = list(dict.fromkeys(group.customer_id for group in groups))
        results = await asyncio.gather(*(self.enrich_customer(cid) for cid in customer_ids))
        by_customer = dict(zip(customer_ids, results, strict=True))

        for group in groups:
            enrichment = by_customer[group.customer_id]
            group.email = enrichment.email
            group.country = enrichment.country
            group.payment_methods_count = enrichment.payment_methods_count

        failures = sum(1 for result in results if result is LOAD_ERROR_ENRICHMENT)
        logger.info("Enriched %d customer(s), %d with errors", len(customer_ids), failures)
        return groups
