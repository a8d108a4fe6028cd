"""Forte ACH service for bank-transfer (echeck) payments.

Uses the Forte REST API v3 over httpx. Credentials come from SSM
Parameter Store under /booking/{environment}/forte/.
"""

import logging
import os
from decimal import Decimal
from functools import lru_cache
from typing import Any

import httpx

from booking_shared.models.enums import AchAccountType
from booking_shared.models.payment import AchTransactionResult

from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

FORTE_API_URL = "https://api.forte.net/v3"
APPROVED_RESPONSE_CODE = "A01"


class ForteServiceError(Exception):
    """Raised when the Forte API cannot be reached or returns garbage."""


class ForteService:
    """Service for Forte echeck sale transactions.

    Usage:
        forte = get_forte_service()
        result = forte.create_echeck_sale(
            amount=Decimal("330.00"),
            first_name="Jane",
            last_name="Doe",
            routing_number="021000021",
            account_number="123456789",
        )
    """

    def __init__(
        self,
        environment: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize Forte service.

        Args:
            environment: Environment name (dev, prod). Defaults to ENVIRONMENT env var.
            http_client: Optional preconfigured httpx client (used in tests).
        """
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self._ssm = get_ssm_service()
        self._http = http_client or httpx.Client(
            base_url=os.environ.get("FORTE_API_URL", FORTE_API_URL),
            timeout=30.0,
        )
        self._credentials: dict[str, str] | None = None

    def _get_credentials(self) -> dict[str, str]:
        """Load Forte credentials from SSM (lazily, once).

        Raises:
            ForteServiceError: If credentials cannot be retrieved.
        """
        if self._credentials is None:
            try:
                self._credentials = {
                    name: self._ssm.get_integration_secret("forte", name, self._environment)
                    for name in ("access_id", "secure_key", "organization_id", "location_id")
                }
            except SSMServiceError as e:
                raise ForteServiceError(f"Failed to load Forte credentials: {e}") from e
        return self._credentials

    def create_echeck_sale(
        self,
        *,
        amount: Decimal,
        first_name: str,
        last_name: str,
        routing_number: str,
        account_number: str,
        account_type: AchAccountType = AchAccountType.CHECKING,
    ) -> AchTransactionResult:
        """Charge a bank account through an echeck sale.

        Args:
            amount: Amount to charge in currency units.
            first_name: Account holder first name.
            last_name: Account holder last name.
            routing_number: Bank routing number.
            account_number: Bank account number.
            account_type: checking or savings.

        Returns:
            AchTransactionResult; `approved` is False for declines.

        Raises:
            ForteServiceError: On transport failures or unreadable responses.
        """
        creds = self._get_credentials()
        org_id = creds["organization_id"]
        loc_id = creds["location_id"]

        body: dict[str, Any] = {
            "action": "sale",
            "authorization_amount": float(amount),
            "billing_address": {"first_name": first_name, "last_name": last_name},
            "echeck": {
                "account_holder": f"{first_name} {last_name}",
                "routing_number": routing_number,
                "account_number": account_number,
                "account_type": account_type.value,
                "sec_code": "WEB",
            },
        }

        try:
            logger.info("Submitting echeck sale for %s", amount)
            response = self._http.post(
                f"/organizations/org_{org_id}/locations/loc_{loc_id}/transactions",
                json=body,
                auth=(creds["access_id"], creds["secure_key"]),
                headers={
                    "Accept": "application/json",
                    "X-Forte-Auth-Organization-Id": f"org_{org_id}",
                },
            )
        except httpx.HTTPError as e:
            logger.error("Forte request failed: %s", e)
            raise ForteServiceError(f"Forte request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ForteServiceError(
                f"Unreadable Forte response (HTTP {response.status_code})"
            ) from e

        return self._parse_transaction(data)

    @staticmethod
    def _parse_transaction(data: dict[str, Any]) -> AchTransactionResult:
        """Interpret a Forte transaction response body."""
        response = data.get("response") or {}
        code = response.get("response_code")
        desc = response.get("response_desc") or ""
        approved = code == APPROVED_RESPONSE_CODE or "APPROVED" in desc.upper()

        if approved:
            logger.info("Echeck sale approved: %s", data.get("transaction_id"))
        else:
            logger.warning("Echeck sale declined: %s (%s)", desc, code)

        return AchTransactionResult(
            approved=approved,
            transaction_id=data.get("transaction_id"),
            response_code=code,
            message=desc or None,
        )


@lru_cache(maxsize=1)
def get_forte_service() -> ForteService:
    """Get the shared ForteService instance (singleton pattern)."""
    return ForteService()
