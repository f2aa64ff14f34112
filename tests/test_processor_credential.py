"""Tests for the processor credential API and lookup."""

import pytest
from fastapi.testclient import TestClient

from payback.main import app
from payback.repositories.credential_repository import CredentialRepository
from payback.services.credentials import (
    get_credential_for_user,
    get_processor_client_for_user,
)
from payback.services.processor.errors import CredentialMissing
from payback.services.processor.stripe_client import StripeProcessorClient
from tests.conftest import DEFAULT_USER_ID, OTHER_USER_ID, auth_headers


@pytest.fixture
def client():
    return TestClient(app)


class TestCredentialLookup:
    def test_missing_raises(self, db_session):
        with pytest.raises(CredentialMissing):
            get_credential_for_user(db_session, DEFAULT_USER_ID)

    def test_returns_own_key(self, db_session):
        repo = CredentialRepository(db_session)
        repo.upsert(DEFAULT_USER_ID, "sk_test_mine")
        repo.upsert(OTHER_USER_ID, "sk_test_theirs")

        assert get_credential_for_user(db_session, DEFAULT_USER_ID) == "sk_test_mine"
        processor = get_processor_client_for_user(db_session, OTHER_USER_ID)
        assert isinstance(processor, StripeProcessorClient)
        assert processor.api_key == "sk_test_theirs"

    def test_key_hint_masks_secret(self, db_session):
        credential = CredentialRepository(db_session).upsert(DEFAULT_USER_ID, "sk_live_abcdef1234")

        assert credential.key_hint == "sk_live_…1234"
        assert "abcdef" not in credential.key_hint


class TestCredentialAPI:
    def test_not_configured(self, client):
        response = client.get("/v1/processor_credential/", headers=auth_headers())
        assert response.status_code == 200
        assert response.json() == {"configured": False, "key_hint": None}

    def test_set_and_get(self, client):
        response = client.put(
            "/v1/processor_credential/",
            json={"secret_key": "  sk_test_abc9876  "},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        assert response.json() == {"configured": True, "key_hint": "sk_test_…9876"}

        response = client.get("/v1/processor_credential/", headers=auth_headers())
        assert response.json()["configured"] is True

        response = client.get("/v1/processor_credential/", headers=auth_headers(OTHER_USER_ID))
        assert response.json()["configured"] is False

    def test_replace_key(self, client, db_session):
        client.put("/v1/processor_credential/", json={"secret_key": "sk_test_one1"}, headers=auth_headers())
        client.put("/v1/processor_credential/", json={"secret_key": "rk_test_two2"}, headers=auth_headers())

        assert get_credential_for_user(db_session, DEFAULT_USER_ID) == "rk_test_two2"

    @pytest.mark.parametrize("secret_key", ["", "   ", "pk_test_123", "whsec_123"])
    def test_invalid_keys_rejected(self, client, secret_key):
        response = client.put(
            "/v1/processor_credential/",
            json={"secret_key": secret_key},
            headers=auth_headers(),
        )
        assert response.status_code == 422

    def test_delete_is_idempotent(self, client):
        client.put("/v1/processor_credential/", json={"secret_key": "sk_test_abc1"}, headers=auth_headers())

        assert client.delete("/v1/processor_credential/", headers=auth_headers()).status_code == 204
        assert client.delete("/v1/processor_credential/", headers=auth_headers()).status_code == 204
        response = client.get("/v1/processor_credential/", headers=auth_headers())
        assert response.json()["configured"] is False
