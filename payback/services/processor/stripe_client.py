"""Stripe implementation of the processor adapter.

Every request passes the owning user's secret key explicitly (``api_key=``)
so that no call can ever run with the module-global key or with another
user's credential.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from payback.core.config import settings
from payback.services.processor.base import (
    ChargeResult,
    CreatedRange,
    CustomerProfile,
    PaymentMethodRecord,
    ProcessorClient,
    Transaction,
    TransactionPage,
    TransactionStatus,
)
from payback.services.processor.errors import (
    NotFound,
    ProcessorRejected,
    ProcessorUnavailable,
)

logger = logging.getLogger(__name__)

# Stripe caps list pages at 100 objects
MAX_PAGE_SIZE = 100


def _field(obj: Any, name: str) -> Any:
    """Read an optional attribute from a processor object."""
    if obj is None:
        return None
    return getattr(obj, name, None)


def _ref_id(value: Any) -> str | None:
    """Return the id of a reference that may be a bare id or an expanded object."""
    if value is None or isinstance(value, str):
        return value
    return _field(value, "id")


def parse_transaction(obj: Any) -> Transaction:
    return Transaction(
        id=obj.id,
        status=TransactionStatus.parse(_field(obj, "status")),
        amount=int(_field(obj, "amount") or 0),
        currency=str(_field(obj, "currency") or "").upper(),
        created=int(_field(obj, "created") or 0),
        customer_id=_ref_id(_field(obj, "customer")),
    )


def parse_payment_method(obj: Any) -> PaymentMethodRecord:
    card = _field(obj, "card")
    return PaymentMethodRecord(
        id=obj.id,
        brand=_field(card, "brand"),
        last4=_field(card, "last4"),
    )


def parse_charge(obj: Any) -> ChargeResult:
    last_error = _field(obj, "last_payment_error")
    return ChargeResult(
        id=obj.id,
        status=str(_field(obj, "status") or ""),
        amount=int(_field(obj, "amount") or 0),
        currency=str(_field(obj, "currency") or "").upper(),
        failure_message=_field(last_error, "message"),
    )


class StripeProcessorClient(ProcessorClient):
    """Processor adapter backed by the Stripe SDK."""

    def __init__(self, api_key: str):
        if not api_key:
            raise ValueError("api_key is required")
        self.api_key = api_key
        self._stripe: Any = None

    @property
    def stripe(self) -> Any:
        """Lazy-load stripe module."""
        if self._stripe is None:
            try:
                import stripe

                stripe.max_network_retries = settings.PROCESSOR_MAX_NETWORK_RETRIES
                self._stripe = stripe
            except ImportError as e:
                raise ImportError("stripe package not installed. Run: pip install stripe") from e
        return self._stripe

    @contextmanager
    def _translate_errors(self, resource: str, resource_id: str | None = None) -> Iterator[None]:
        """Map Stripe SDK exceptions onto the adapter error types."""
        stripe = self.stripe
        try:
            yield
        except stripe.CardError as e:
            raise ProcessorRejected(_error_message(e), code=e.code) from e
        except stripe.InvalidRequestError as e:
            if e.code == "resource_missing":
                raise NotFound(resource, resource_id) from e
            raise ProcessorRejected(_error_message(e), code=e.code) from e
        except (stripe.AuthenticationError, stripe.PermissionError, stripe.IdempotencyError) as e:
            raise ProcessorRejected(_error_message(e), code=e.code) from e
        except (stripe.APIConnectionError, stripe.RateLimitError, stripe.APIError) as e:
            raise ProcessorUnavailable(_error_message(e)) from e
        except stripe.StripeError as e:
            raise ProcessorUnavailable(_error_message(e)) from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProcessorUnavailable(f"Malformed {resource} response from processor") from e

    def list_transactions(
        self,
        created: CreatedRange,
        cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> TransactionPage:
        params: dict[str, Any] = {"limit": min(page_size, MAX_PAGE_SIZE)}
        created_params = created.as_params()
        if created_params:
            params["created"] = created_params
        if cursor:
            params["starting_after"] = cursor

        with self._translate_errors("payment_intents"):
            page = self.stripe.PaymentIntent.list(api_key=self.api_key, **params)
            items = [parse_transaction(obj) for obj in page.data]
            has_more = bool(page.has_more) and bool(items)
        logger.debug("Fetched %d payment intents (cursor=%s, has_more=%s)", len(items), cursor, has_more)
        return TransactionPage(
            items=items,
            has_more=has_more,
            next_cursor=items[-1].id if has_more else None,
        )

    def get_transaction(self, transaction_id: str) -> Transaction:
        with self._translate_errors("payment_intent", transaction_id):
            obj = self.stripe.PaymentIntent.retrieve(transaction_id, api_key=self.api_key)
            transaction = parse_transaction(obj)
        return transaction

    def get_customer(self, customer_id: str) -> CustomerProfile:
        with self._translate_errors("customer", customer_id):
            obj = self.stripe.Customer.retrieve(customer_id, api_key=self.api_key)
            if _field(obj, "deleted"):
                raise NotFound("customer", customer_id)
            country = _field(_field(obj, "address"), "country")
            profile = CustomerProfile(
                id=obj.id,
                email=_field(obj, "email"),
                country=country.upper() if country else None,
                name=_field(obj, "name"),
            )
        return profile

    def list_payment_methods(self, customer_id: str) -> list[PaymentMethodRecord]:
        with self._translate_errors("customer", customer_id):
            page = self.stripe.PaymentMethod.list(
                api_key=self.api_key,
                customer=customer_id,
                type="card",
                limit=MAX_PAGE_SIZE,
            )
            methods = [parse_payment_method(obj) for obj in page.data]
        return methods

    def create_and_confirm_charge(
        self,
        amount: int,
        currency: str,
        customer_id: str,
        payment_method_id: str,
        metadata: dict[str, str] | None = None,
        idempotency_key: str | None = None,
    ) -> ChargeResult:
        params: dict[str, Any] = {
            "amount": amount,
            "currency": currency.lower(),
            "customer": customer_id,
            "payment_method": payment_method_id,
            "confirm": True,
            "off_session": True,
            "metadata": metadata or {},
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key

        with self._translate_errors("payment_method", payment_method_id):
            obj = self.stripe.PaymentIntent.create(api_key=self.api_key, **params)
            charge = parse_charge(obj)
        return charge


def _error_message(exc: Any) -> str:
    return getattr(exc, "user_message", None) or str(exc) or exc.__class__.__name__
