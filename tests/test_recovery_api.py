"""Tests for the retry endpoints, request idempotency and rate limiting."""

import pytest
from fastapi.testclient import TestClient

from payback.core.auth import get_processor_client
from payback.core.idempotency import processor_idempotency_key
from payback.main import app
from payback.models.recovery import RecoveryRecord
from payback.routers.recovery import retry_rate_limiter
from payback.services.processor.base import CustomerProfile, PaymentMethodRecord
from payback.services.processor.errors import ProcessorRejected, ProcessorUnavailable
from tests.conftest import auth_headers
from tests.fake_processor import FakeProcessorClient, make_transaction


@pytest.fixture
def processor():
    return FakeProcessorClient(
        transactions=[
            make_transaction("pi_ref", amount=2500, customer_id="cus_1"),
            make_transaction("pi_ref2", amount=1000, customer_id="cus_2"),
        ],
        customers={"cus_1": CustomerProfile(id="cus_1", email="one@example.com")},
        payment_methods={
            "cus_1": [
                PaymentMethodRecord(id="pm_a", brand="visa", last4="0002"),
                PaymentMethodRecord(id="pm_b", brand="visa", last4="4242"),
            ],
            "cus_2": [PaymentMethodRecord(id="pm_c", brand="amex", last4="0005")],
        },
        charge_outcomes={"pm_a": ProcessorRejected("Your card was declined.", code="card_declined")},
    )


@pytest.fixture
def client(processor):
    app.dependency_overrides[get_processor_client] = lambda: processor
    yield TestClient(app)
    app.dependency_overrides.pop(get_processor_client, None)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Ensure rate limiter is clean before and after every test."""
    retry_rate_limiter.reset()
    yield
    retry_rate_limiter.reset()


RETRY = {"reference_charge_id": "pi_ref", "customer_id": "cus_1"}


class TestRetryEndpoint:
    def test_retry_succeeds_with_second_method(self, client, db_session):
        response = client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Payment succeeded with visa ending in 4242"
        assert [a["payment_method_id"] for a in body["attempts"]] == ["pm_a", "pm_b"]
        assert body["attempts"][0]["error"] == "Your card was declined."
        assert body["new_charge_id"] == "pi_new_1"
        assert body["recovery_id"] is not None

        record = db_session.query(RecoveryRecord).one()
        assert str(record.id) == body["recovery_id"]
        assert record.amount == 2500
        assert record.customer_email == "one@example.com"

    def test_all_methods_fail(self, client, processor, db_session):
        processor.charge_outcomes["pm_b"] = "requires_payment_method"

        response = client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers())

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is False
        assert body["message"] == "All 2 payment methods failed"
        assert body["recovery_id"] is None
        assert db_session.query(RecoveryRecord).count() == 0

    def test_no_payment_methods(self, client):
        response = client.post(
            "/v1/recovery/retry",
            json={"reference_charge_id": "pi_ref", "customer_id": "cus_none"},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "No payment methods found for this customer"

    def test_unknown_reference(self, client):
        response = client.post(
            "/v1/recovery/retry",
            json={"reference_charge_id": "pi_missing", "customer_id": "cus_1"},
            headers=auth_headers(),
        )

        assert response.status_code == 404

    def test_processor_unavailable(self, client, processor):
        def fail(*args, **kwargs):
            raise ProcessorUnavailable("Network down")

        processor.list_payment_methods = fail

        response = client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers())

        assert response.status_code == 502

    def test_validation(self, client):
        response = client.post(
            "/v1/recovery/retry",
            json={"reference_charge_id": "", "customer_id": "cus_1"},
            headers=auth_headers(),
        )
        assert response.status_code == 422

    def test_requires_auth(self, client):
        assert client.post("/v1/recovery/retry", json=RETRY).status_code == 401


class TestRetryIdempotency:
    def test_same_key_replays_response(self, client, processor, db_session):
        headers = {**auth_headers(), "Idempotency-Key": "retry-key-1"}

        first = client.post("/v1/recovery/retry", json=RETRY, headers=headers)
        second = client.post("/v1/recovery/retry", json=RETRY, headers=headers)

        assert first.status_code == second.status_code == 200
        assert second.headers.get("Idempotency-Replayed") == "true"
        assert second.json() == first.json()
        assert len(processor.charge_calls) == 2
        assert db_session.query(RecoveryRecord).count() == 1

    def test_key_seeds_processor_idempotency(self, client, processor):
        headers = {**auth_headers(), "Idempotency-Key": "retry-key-2"}

        client.post("/v1/recovery/retry", json=RETRY, headers=headers)

        assert [c["idempotency_key"] for c in processor.charge_calls] == [
            processor_idempotency_key("retry-key-2", "pi_ref", "pm_a"),
            processor_idempotency_key("retry-key-2", "pi_ref", "pm_b"),
        ]

    def test_keys_are_scoped_per_user(self, client, processor):
        from tests.conftest import OTHER_USER_ID

        client.post(
            "/v1/recovery/retry", json=RETRY, headers={**auth_headers(), "Idempotency-Key": "shared"}
        )
        response = client.post(
            "/v1/recovery/retry",
            json=RETRY,
            headers={**auth_headers(OTHER_USER_ID), "Idempotency-Key": "shared"},
        )

        assert response.headers.get("Idempotency-Replayed") is None

    def test_without_key(self, client):
        response = client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers())
        assert response.headers.get("Idempotency-Replayed") is None


class TestRetryRateLimit:
    def test_rejects_over_limit(self, client, monkeypatch):
        monkeypatch.setattr(retry_rate_limiter, "max_requests", 2)

        codes = [
            client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers()).status_code
            for _ in range(3)
        ]

        assert codes == [200, 200, 429]

    def test_rate_limit_response_has_retry_after(self, client, monkeypatch):
        monkeypatch.setattr(retry_rate_limiter, "max_requests", 1)
        client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers())

        response = client.post("/v1/recovery/retry", json=RETRY, headers=auth_headers())

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) >= 1


class TestRetryBatchEndpoint:
    def test_batch_in_order_with_duplicate(self, client, processor):
        payload = {
            "items": [
                RETRY,
                {"reference_charge_id": "pi_ref2", "customer_id": "cus_2"},
                RETRY,
            ]
        }

        response = client.post("/v1/recovery/retry_batch", json=payload, headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert [r["reference_charge_id"] for r in body["results"]] == ["pi_ref", "pi_ref2", "pi_ref"]
        assert [r["success"] for r in body["results"]] == [True, True, False]
        assert body["results"][2]["message"] == "A retry for this charge is already in progress"
        assert body["succeeded"] == 2
        assert body["failed"] == 1
        assert [c["payment_method_id"] for c in processor.charge_calls] == ["pm_a", "pm_b", "pm_c"]

    def test_batch_item_error_is_reported(self, client):
        payload = {
            "items": [
                {"reference_charge_id": "pi_missing", "customer_id": "cus_1"},
                {"reference_charge_id": "pi_ref2", "customer_id": "cus_2"},
            ]
        }

        body = client.post("/v1/recovery/retry_batch", json=payload, headers=auth_headers()).json()

        assert body["results"][0]["success"] is False
        assert "not found" in body["results"][0]["message"]
        assert body["results"][1]["success"] is True

    def test_empty_batch_rejected(self, client):
        response = client.post("/v1/recovery/retry_batch", json={"items": []}, headers=auth_headers())
        assert response.status_code == 422
