"""Unit tests for ForteService.

The Forte REST API is replaced by an httpx.MockTransport; credentials come
from a mocked SSM service.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import httpx
import pytest

from booking_shared.models.enums import AchAccountType
from booking_shared.services.forte_service import ForteService, ForteServiceError
from booking_shared.services.ssm_service import SSMServiceError


# === Test Configuration ===

FORTE_SECRETS = {
    "access_id": "access-123",
    "secure_key": "secure-456",
    "organization_id": "300001",
    "location_id": "400002",
}

SALE_KWARGS = {
    "amount": Decimal("330.00"),
    "first_name": "Jane",
    "last_name": "Doe",
    "routing_number": "021000021",
    "account_number": "123456789",
}


# === Test Fixtures ===


@pytest.fixture
def mock_ssm_service():
    """Mock SSM service for credential retrieval."""
    with patch("booking_shared.services.forte_service.get_ssm_service") as mock_get_ssm:
        mock_ssm = MagicMock()
        mock_ssm.get_integration_secret.side_effect = (
            lambda integration, name, environment=None: FORTE_SECRETS[name]
        )
        mock_get_ssm.return_value = mock_ssm
        yield mock_ssm


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    """Requests captured by the mock transport."""
    return []


def make_service(requests_seen: list[httpx.Request], responder) -> ForteService:
    """Build a ForteService whose HTTP calls go to `responder`."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return responder(request)

    client = httpx.Client(
        base_url="https://sandbox.forte.net/api/v3",
        transport=httpx.MockTransport(handler),
    )
    return ForteService(environment="dev", http_client=client)


def forte_response(code: str, desc: str, transaction_id: str | None = "trn_abc") -> httpx.Response:
    """Forte transaction response body."""
    return httpx.Response(
        201,
        json={
            "transaction_id": transaction_id,
            "response": {"response_code": code, "response_desc": desc},
        },
    )


# === Echeck Sale Tests ===


class TestCreateEcheckSale:
    """Test echeck sale submission and response parsing."""

    def test_approved_sale(self, mock_ssm_service, requests_seen):
        """A01 responses are approved and carry the transaction ID."""
        service = make_service(requests_seen, lambda r: forte_response("A01", "APPROVED"))

        result = service.create_echeck_sale(**SALE_KWARGS)

        assert result.approved is True
        assert result.transaction_id == "trn_abc"
        assert result.response_code == "A01"

    def test_request_shape(self, mock_ssm_service, requests_seen):
        """The sale posts to the organization/location path with basic auth."""
        service = make_service(requests_seen, lambda r: forte_response("A01", "APPROVED"))

        service.create_echeck_sale(**SALE_KWARGS, account_type=AchAccountType.SAVINGS)

        request = requests_seen[0]
        assert request.method == "POST"
        assert request.url.path == (
            "/api/v3/organizations/org_300001/locations/loc_400002/transactions"
        )
        assert request.headers["X-Forte-Auth-Organization-Id"] == "org_300001"
        assert request.headers["Authorization"].startswith("Basic ")

        body = json.loads(request.content)
        assert body["action"] == "sale"
        assert body["authorization_amount"] == 330.0
        assert body["echeck"] == {
            "account_holder": "Jane Doe",
            "routing_number": "021000021",
            "account_number": "123456789",
            "account_type": "savings",
            "sec_code": "WEB",
        }

    def test_approved_by_description(self, mock_ssm_service, requests_seen):
        """An APPROVED description counts even with another code."""
        service = make_service(requests_seen, lambda r: forte_response("A05", "Approved - pending"))

        assert service.create_echeck_sale(**SALE_KWARGS).approved is True

    def test_declined_sale(self, mock_ssm_service, requests_seen):
        """Other codes are declines with the processor message."""
        service = make_service(
            requests_seen, lambda r: forte_response("U02", "INVALID ROUTING NUMBER", None)
        )

        result = service.create_echeck_sale(**SALE_KWARGS)

        assert result.approved is False
        assert result.transaction_id is None
        assert result.message == "INVALID ROUTING NUMBER"

    def test_transport_error(self, mock_ssm_service, requests_seen):
        """Connection failures raise ForteServiceError."""

        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        service = make_service(requests_seen, fail)

        with pytest.raises(ForteServiceError, match="Forte request failed"):
            service.create_echeck_sale(**SALE_KWARGS)

    def test_non_json_response(self, mock_ssm_service, requests_seen):
        """Unreadable bodies raise ForteServiceError."""
        service = make_service(requests_seen, lambda r: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(ForteServiceError, match="HTTP 502"):
            service.create_echeck_sale(**SALE_KWARGS)

    def test_missing_credentials(self, mock_ssm_service, requests_seen):
        """SSM failures raise ForteServiceError before any request."""
        mock_ssm_service.get_integration_secret.side_effect = SSMServiceError("not found")
        service = make_service(requests_seen, lambda r: forte_response("A01", "APPROVED"))

        with pytest.raises(ForteServiceError, match="credentials"):
            service.create_echeck_sale(**SALE_KWARGS)

        assert requests_seen == []

    def test_credentials_loaded_once(self, mock_ssm_service, requests_seen):
        """Credentials are cached on the instance."""
        service = make_service(requests_seen, lambda r: forte_response("A01", "APPROVED"))

        service.create_echeck_sale(**SALE_KWARGS)
        service.create_echeck_sale(**SALE_KWARGS)

        assert mock_ssm_service.get_integration_secret.call_count == 4
        mock_ssm_service.get_integration_secret.assert_any_call("forte", "access_id", "dev")
