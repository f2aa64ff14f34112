"""Tests for idempotency model, repository and core dependency."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payback.core.idempotency import (
    MAX_KEY_LENGTH,
    IdempotencyResult,
    check_idempotency,
    processor_idempotency_key,
    record_idempotency_response,
)
from payback.models.idempotency_record import IdempotencyRecord
from payback.repositories.idempotency_repository import IdempotencyRepository
from tests.conftest import DEFAULT_USER_ID, OTHER_USER_ID


@pytest.fixture
def repo(db_session: Session) -> IdempotencyRepository:
    return IdempotencyRepository(db_session)


def _create(repo: IdempotencyRepository, key: str, user_id=DEFAULT_USER_ID) -> IdempotencyRecord:
    return repo.create(
        user_id=user_id,
        idempotency_key=key,
        request_method="POST",
        request_path="/v1/recovery/retry",
    )


# ---------------------------------------------------------------------------
# Model and repository tests
# ---------------------------------------------------------------------------


class TestIdempotencyRepository:
    def test_create_and_get_by_key(self, repo: IdempotencyRepository) -> None:
        _create(repo, "key-1")

        fetched = repo.get_by_key(DEFAULT_USER_ID, "key-1")
        assert fetched is not None
        assert fetched.request_path == "/v1/recovery/retry"
        assert fetched.response_status is None

    def test_unique_per_user(self, db_session: Session, repo: IdempotencyRepository) -> None:
        _create(repo, "dup-key")
        db_session.add(
            IdempotencyRecord(
                user_id=DEFAULT_USER_ID,
                idempotency_key="dup-key",
                request_method="POST",
                request_path="/v1/recovery/retry",
            )
        )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_different_users_dont_collide(self, repo: IdempotencyRepository) -> None:
        _create(repo, "shared-key")
        _create(repo, "shared-key", user_id=OTHER_USER_ID)

        assert repo.get_by_key(DEFAULT_USER_ID, "shared-key") is not None
        assert repo.get_by_key(OTHER_USER_ID, "shared-key") is not None

    def test_update_response(self, repo: IdempotencyRepository) -> None:
        record = _create(repo, "update-key")

        repo.update_response(record, 200, {"success": True})

        fetched = repo.get_by_key(DEFAULT_USER_ID, "update-key")
        assert fetched is not None
        assert fetched.response_status == 200
        assert fetched.response_body == {"success": True}

    def test_delete_expired(self, db_session: Session, repo: IdempotencyRepository) -> None:
        # Create a record and backdate it
        record = _create(repo, "old-key")
        record.created_at = datetime.now(UTC) - timedelta(hours=25)  # type: ignore[assignment]
        db_session.commit()
        _create(repo, "new-key")

        deleted = repo.delete_expired(max_age_hours=24)

        assert deleted == 1
        assert repo.get_by_key(DEFAULT_USER_ID, "old-key") is None
        assert repo.get_by_key(DEFAULT_USER_ID, "new-key") is not None

    def test_delete_expired_none(self, repo: IdempotencyRepository) -> None:
        _create(repo, "fresh-key")
        assert repo.delete_expired(max_age_hours=24) == 0


# ---------------------------------------------------------------------------
# Core dependency tests
# ---------------------------------------------------------------------------


def _make_request(headers: dict[str, str] | None = None) -> Request:
    """Build a minimal ASGI Request for testing."""
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/v1/recovery/retry",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    return Request(scope)


class TestCheckIdempotency:
    def test_no_header_returns_none(self, db_session: Session) -> None:
        assert check_idempotency(_make_request(), db_session, DEFAULT_USER_ID) is None

    def test_new_key_registers_record(self, db_session: Session, repo: IdempotencyRepository) -> None:
        result = check_idempotency(
            _make_request({"Idempotency-Key": "new-key"}), db_session, DEFAULT_USER_ID
        )

        assert isinstance(result, IdempotencyResult)
        assert result.key == "new-key"
        assert result.method == "POST"
        assert result.path == "/v1/recovery/retry"
        assert repo.get_by_key(DEFAULT_USER_ID, "new-key") is not None

    def test_completed_key_returns_cached_response(
        self, db_session: Session, repo: IdempotencyRepository
    ) -> None:
        record = _create(repo, "cached-key")
        repo.update_response(record, 200, {"success": True, "message": "ok"})

        result = check_idempotency(
            _make_request({"Idempotency-Key": "cached-key"}), db_session, DEFAULT_USER_ID
        )

        assert isinstance(result, JSONResponse)
        assert result.status_code == 200
        assert result.headers.get("Idempotency-Replayed") == "true"
        assert b'"message":"ok"' in result.body

    def test_pending_key_returns_idempotency_result(
        self, db_session: Session, repo: IdempotencyRepository
    ) -> None:
        _create(repo, "pending-key")

        result = check_idempotency(
            _make_request({"Idempotency-Key": "pending-key"}), db_session, DEFAULT_USER_ID
        )

        assert isinstance(result, IdempotencyResult)
        assert db_session.query(IdempotencyRecord).count() == 1

    def test_overlong_key_rejected(self, db_session: Session) -> None:
        request = _make_request({"Idempotency-Key": "k" * (MAX_KEY_LENGTH + 1)})

        with pytest.raises(HTTPException) as exc_info:
            check_idempotency(request, db_session, DEFAULT_USER_ID)
        assert exc_info.value.status_code == 400


class TestRecordIdempotencyResponse:
    def test_records_response(self, db_session: Session, repo: IdempotencyRepository) -> None:
        _create(repo, "record-key")

        record_idempotency_response(db_session, DEFAULT_USER_ID, "record-key", 200, {"ok": True})

        fetched = repo.get_by_key(DEFAULT_USER_ID, "record-key")
        assert fetched is not None
        assert fetched.response_status == 200
        assert fetched.response_body == {"ok": True}

    def test_no_record_does_nothing(self, db_session: Session) -> None:
        record_idempotency_response(db_session, DEFAULT_USER_ID, "missing", 200, {})
        assert db_session.query(IdempotencyRecord).count() == 0


class TestProcessorIdempotencyKey:
    def test_longest_header_fits_processor_limit(self) -> None:
        key = processor_idempotency_key("k" * MAX_KEY_LENGTH, "pi_" + "A" * 24, "pm_" + "B" * 24)

        assert len(key) <= 255

    def test_stable_for_same_inputs(self) -> None:
        assert processor_idempotency_key("req-1", "pi_ref", "pm_a") == processor_idempotency_key(
            "req-1", "pi_ref", "pm_a"
        )

    def test_differs_per_payment_method(self) -> None:
        assert processor_idempotency_key("req-1", "pi_ref", "pm_a") != processor_idempotency_key(
            "req-1", "pi_ref", "pm_b"
        )
