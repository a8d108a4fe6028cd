"""Tests for the Stripe webhook endpoint.

Signature verification and event handling are mocked; these tests cover
the HTTP contract.
"""

import hashlib
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from booking_api.dependencies import get_stripe, get_webhook_handler
from booking_api.main import app
from booking_shared.models.stripe_webhook import WebhookOutcome
from booking_shared.services.stripe_service import StripeService, StripeServiceError
from booking_shared.services.webhook_handler import WebhookHandler


# === Test Fixtures ===


PAYLOAD = b'{"id": "evt_123", "type": "payment_intent.succeeded"}'

EVENT = {
    "id": "evt_123",
    "type": "payment_intent.succeeded",
    "data": {"object": {"id": "pi_123", "metadata": {}}},
}


@pytest.fixture
def stripe_svc() -> MagicMock:
    mock = MagicMock(spec=StripeService)
    mock.verify_webhook_signature.return_value = EVENT
    return mock


@pytest.fixture
def handler() -> MagicMock:
    mock = MagicMock(spec=WebhookHandler)
    mock.handle_event.return_value = WebhookOutcome(
        processing_result="success",
        payment_intent_id="pi_123",
        booking_id="987",
    )
    return mock


@pytest.fixture
def client(stripe_svc, handler) -> TestClient:
    app.dependency_overrides[get_stripe] = lambda: stripe_svc
    app.dependency_overrides[get_webhook_handler] = lambda: handler
    yield TestClient(app)
    app.dependency_overrides.clear()


def post_event(client: TestClient, headers: dict | None = None):
    return client.post(
        "/api/webhooks/stripe",
        content=PAYLOAD,
        headers={"Stripe-Signature": "t=1,v1=abc"} if headers is None else headers,
    )


# === Signature Tests ===


class TestSignature:
    """Test signature handling."""

    def test_missing_signature(self, client: TestClient, handler):
        response = post_event(client, headers={})

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "ERR_STRIPE_001"
        assert body["details"] == {"message": "Missing Stripe-Signature header"}
        handler.handle_event.assert_not_called()

    def test_invalid_signature(self, client: TestClient, stripe_svc, handler):
        stripe_svc.verify_webhook_signature.side_effect = StripeServiceError(
            "Invalid webhook signature"
        )

        response = post_event(client)

        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_STRIPE_001"
        handler.handle_event.assert_not_called()

    def test_raw_body_verified(self, client: TestClient, stripe_svc):
        """The signature is checked against the exact bytes received."""
        post_event(client)

        stripe_svc.verify_webhook_signature.assert_called_once_with(PAYLOAD, "t=1,v1=abc")


# === Processing Tests ===


class TestProcessing:
    """Test event processing responses."""

    def test_processed_event(self, client: TestClient, handler):
        response = post_event(client)

        assert response.status_code == 200
        assert response.json() == {
            "received": True,
            "event_id": "evt_123",
            "event_type": "payment_intent.succeeded",
            "processing_result": "success",
            "booking_id": "987",
            "message": None,
        }
        handler.handle_event.assert_called_once_with(
            EVENT, hashlib.sha256(PAYLOAD).hexdigest()
        )

    def test_duplicate_event(self, client: TestClient, handler):
        """Redeliveries are acknowledged with 200."""
        handler.handle_event.return_value = WebhookOutcome(
            processing_result="duplicate",
            message="Event already processed",
        )

        response = post_event(client)

        assert response.status_code == 200
        assert response.json()["processing_result"] == "duplicate"

    def test_processing_error_acknowledged(self, client: TestClient, handler):
        """Handler errors are reported in the body, not as a failure status."""
        handler.handle_event.return_value = WebhookOutcome(
            processing_result="error",
            message="Room closed",
        )

        response = post_event(client)

        assert response.status_code == 200
        assert response.json()["message"] == "Room closed"
