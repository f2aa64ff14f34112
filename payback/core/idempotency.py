"""Idempotency support for API endpoints.

``check_idempotency`` reads the ``Idempotency-Key`` header. If a response was
already stored for the key it returns that response as a ``JSONResponse``;
otherwise it registers the key and returns an ``IdempotencyResult`` so the
endpoint can store its response with ``record_idempotency_response``.
"""

import hashlib
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from payback.repositories.idempotency_repository import IdempotencyRepository

MAX_KEY_LENGTH = 200


def processor_idempotency_key(seed: str, reference_id: str, payment_method_id: str) -> str:
    """Derive the per-attempt processor idempotency key from a request key.

    The digest has a fixed length of 64 characters, which stays under the
    processor limit of 255 whatever the request key and ids are.
    """
    raw = f"{seed}:{reference_id}:{payment_method_id}"
    return hashlib.sha256(raw.encode()).hexdigest()


@dataclass
class IdempotencyResult:
    """Holds pending idempotency key info for later recording."""

    key: str
    method: str
    path: str


def check_idempotency(
    request: Request,
    db: Session,
    user_id: UUID,
) -> JSONResponse | IdempotencyResult | None:
    """Check the ``Idempotency-Key`` header for a cached response.

    Returns:
        - ``None`` if no ``Idempotency-Key`` header is present.
        - A ``JSONResponse`` with the cached response and ``Idempotency-Replayed: true``
          header if a completed record already exists.
        - An ``IdempotencyResult`` for a key without a stored response, to be
          recorded after processing.
    """
    key = request.headers.get("Idempotency-Key")
    if not key:
        return None
    if len(key) > MAX_KEY_LENGTH:
        raise HTTPException(status_code=400, detail="Idempotency-Key is too long")

    repo = IdempotencyRepository(db)
    existing = repo.get_by_key(user_id, key)

    if existing is not None and existing.response_status is not None:
        response = JSONResponse(
            content=existing.response_body,
            status_code=int(existing.response_status),
        )
        response.headers["Idempotency-Replayed"] = "true"
        return response

    if existing is None:
        repo.create(
            user_id=user_id,
            idempotency_key=key,
            request_method=request.method,
            request_path=request.url.path,
        )

    return IdempotencyResult(key=key, method=request.method, path=request.url.path)


def record_idempotency_response(
    db: Session,
    user_id: UUID,
    key: str,
    status: int,
    body: dict[str, Any],
) -> None:
    """Persist the endpoint response so subsequent calls return the cached result."""
    repo = IdempotencyRepository(db)
    record = repo.get_by_key(user_id, key)
    if record is not None:
        repo.update_response(record, status, body)
