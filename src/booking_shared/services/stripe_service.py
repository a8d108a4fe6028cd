"""Stripe payment service for card PaymentIntents and webhooks.

Provides integration with Stripe using the v8+ StripeClient pattern.
Retrieves API keys from SSM Parameter Store.
"""

import hashlib
import json
import logging
import os
from functools import lru_cache
from typing import Any

import stripe
from stripe import StripeClient

from booking_shared.models.payment import ScheduledCharge
from booking_shared.models.pricing import BillingPeriod

from .pricing import to_cents
from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

# Stripe caps metadata values at 500 characters
METADATA_VALUE_LIMIT = 500
SCHEDULE_PARTS_KEY = "billing_schedule_parts"
SCHEDULE_KEY_PREFIX = "billing_schedule_"


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


def encode_schedule_metadata(periods: list[BillingPeriod]) -> dict[str, str]:
    """Encode billing periods into Stripe metadata entries.

    The JSON list is split across numbered keys so that no single value
    exceeds Stripe's metadata length limit.

    Args:
        periods: Billing periods to carry on the PaymentIntent

    Returns:
        Metadata entries (empty if there are no periods)
    """
    if not periods:
        return {}
    payload = json.dumps(
        [p.model_dump(mode="json") for p in periods],
        separators=(",", ":"),
    )
    chunks = [
        payload[i : i + METADATA_VALUE_LIMIT]
        for i in range(0, len(payload), METADATA_VALUE_LIMIT)
    ]
    metadata = {SCHEDULE_PARTS_KEY: str(len(chunks))}
    for index, chunk in enumerate(chunks, start=1):
        metadata[f"{SCHEDULE_KEY_PREFIX}{index}"] = chunk
    return metadata


def decode_schedule_metadata(metadata: dict[str, Any]) -> list[BillingPeriod]:
    """Rebuild billing periods from PaymentIntent metadata.

    Args:
        metadata: PaymentIntent metadata

    Returns:
        Billing periods in order, or an empty list if none were stored

    Raises:
        ValueError: If the stored chunks are missing or not valid JSON
    """
    parts = metadata.get(SCHEDULE_PARTS_KEY)
    if not parts:
        return []
    try:
        payload = "".join(
            metadata[f"{SCHEDULE_KEY_PREFIX}{index}"] for index in range(1, int(parts) + 1)
        )
    except KeyError as e:
        raise ValueError(f"Billing schedule metadata is incomplete: missing {e}") from e
    return [BillingPeriod.model_validate(item) for item in json.loads(payload)]


class StripeService:
    """Service for Stripe payment operations.

    Handles:
    - Customer and PaymentIntent creation
    - Webhook signature validation
    - Preparing future billing-period charges for long-term stays

    Usage:
        stripe_svc = get_stripe_service()
        customer_id = stripe_svc.create_customer(email="guest@example.com", name="Jane Doe")
        intent = stripe_svc.create_payment_intent(
            amount_cents=33000,
            customer_id=customer_id,
            description="room-12345 | 2026-07-15 to 2026-07-18",
            receipt_email="guest@example.com",
        )
    """

    def __init__(self, environment: str | None = None) -> None:
        """Initialize Stripe service with credentials from SSM.

        Args:
            environment: Environment name (dev, prod). Defaults to ENVIRONMENT env var.
        """
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self.currency = os.environ.get("PAYMENT_CURRENCY", "usd")
        self._ssm = get_ssm_service()
        self._client: StripeClient | None = None
        self._webhook_secret: str | None = None

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            StripeServiceError: If credentials cannot be retrieved.
        """
        if self._client is None:
            try:
                secret_key = self._ssm.get_integration_secret(
                    "stripe", "secret_key", self._environment
                )
                self._client = StripeClient(secret_key)
                logger.info("Stripe client initialized for environment: %s", self._environment)
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to initialize Stripe client: {e}") from e
        return self._client

    def _get_webhook_secret(self) -> str:
        """Get the webhook signing secret.

        Raises:
            StripeServiceError: If secret cannot be retrieved.
        """
        if self._webhook_secret is None:
            try:
                self._webhook_secret = self._ssm.get_integration_secret(
                    "stripe", "webhook_secret", self._environment
                )
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to get webhook secret: {e}") from e
        return self._webhook_secret

    def create_customer(
        self,
        *,
        email: str,
        name: str,
        phone: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Create a Stripe customer for the guest.

        Args:
            email: Guest email.
            name: Guest full name.
            phone: Optional phone number.
            metadata: Stay details to attach.

        Returns:
            Stripe customer ID (cus_xxx).

        Raises:
            StripeServiceError: If customer creation fails.
        """
        client = self._get_client()
        params: dict[str, Any] = {"email": email, "name": name}
        if phone:
            params["phone"] = phone
        if metadata:
            params["metadata"] = metadata

        try:
            customer = client.customers.create(params=params)
            logger.info("Stripe customer created: %s", customer.id)
            return customer.id
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error("Stripe customer creation failed: %s (code: %s)", str(e), error_code)
            raise StripeServiceError(
                f"Failed to create customer: {e}",
                stripe_error_code=error_code,
            ) from e

    def create_payment_intent(
        self,
        *,
        amount_cents: int,
        customer_id: str,
        description: str,
        receipt_email: str | None = None,
        metadata: dict[str, str] | None = None,
        save_card: bool = False,
        payment_method_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        """Create a PaymentIntent without confirming it.

        Args:
            amount_cents: Amount in minor currency units.
            customer_id: Stripe customer ID.
            description: Statement description.
            receipt_email: Email for the Stripe receipt.
            metadata: Stay and billing metadata read back by the webhook.
            save_card: Save the card for later off-session charges.
            payment_method_id: Saved card to attach (for scheduled charges).
            idempotency_key: Optional idempotency key.

        Returns:
            Dict with payment_intent_id, client_secret and amount.

        Raises:
            StripeServiceError: If the PaymentIntent cannot be created.
        """
        client = self._get_client()

        params: dict[str, Any] = {
            "amount": amount_cents,
            "currency": self.currency,
            "customer": customer_id,
            "description": description,
            "metadata": metadata or {},
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        if save_card:
            params["setup_future_usage"] = "off_session"
        if payment_method_id:
            params["payment_method"] = payment_method_id

        options: dict[str, Any] = {}
        if idempotency_key:
            options["idempotency_key"] = idempotency_key

        try:
            logger.info(
                "Creating PaymentIntent for customer %s, amount %d cents",
                customer_id,
                amount_cents,
            )
            intent = client.payment_intents.create(params=params, options=options)
            logger.info("PaymentIntent created: %s", intent.id)
            return {
                "payment_intent_id": intent.id,
                "client_secret": intent.client_secret,
                "amount": intent.amount,
            }

        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error(
                "Stripe PaymentIntent creation failed: %s (code: %s)",
                str(e),
                error_code,
            )
            raise StripeServiceError(
                f"Failed to create payment intent: {e}",
                stripe_error_code=error_code,
            ) from e

    def verify_webhook_signature(self, payload: bytes, signature: str) -> dict:
        """Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            Parsed Stripe event dictionary.

        Raises:
            StripeServiceError: If signature is invalid.
        """
        webhook_secret = self._get_webhook_secret()

        try:
            event = stripe.Webhook.construct_event(payload, signature, webhook_secret)
            logger.info("Webhook signature verified for event: %s", event["id"])
            return event.to_dict() if hasattr(event, "to_dict") else dict(event)

        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise StripeServiceError("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", str(e))
            raise StripeServiceError("Invalid webhook payload") from e

    def get_saved_card(self, customer_id: str) -> str | None:
        """Return the first saved card payment method for a customer.

        Args:
            customer_id: Stripe customer ID.

        Returns:
            PaymentMethod ID (pm_xxx) or None if the customer has no card.

        Raises:
            StripeServiceError: If the lookup fails.
        """
        client = self._get_client()
        try:
            methods = client.payment_methods.list(
                params={"customer": customer_id, "type": "card"}
            )
        except stripe.StripeError as e:
            raise StripeServiceError(
                f"Failed to list payment methods: {e}",
                stripe_error_code=getattr(e, "code", None),
            ) from e
        return methods.data[0].id if methods.data else None

    def schedule_period_charge(
        self,
        *,
        customer_id: str,
        payment_method_id: str,
        period: BillingPeriod,
        stay_metadata: dict[str, str],
    ) -> ScheduledCharge:
        """Prepare an unconfirmed PaymentIntent for a future billing period.

        The intent is confirmed off-session by a separate job on the
        period's start date; nothing is charged here.

        Args:
            customer_id: Stripe customer ID.
            payment_method_id: Saved card to charge.
            period: Billing period to charge.
            stay_metadata: Room and date metadata copied from the first payment.

        Returns:
            ScheduledCharge describing the prepared intent.

        Raises:
            StripeServiceError: If the PaymentIntent cannot be created.
        """
        room_slug = stay_metadata.get("room_slug", "")
        metadata = {
            "type": "recurring_payment",
            "room_id": stay_metadata.get("room_id", ""),
            "room_slug": room_slug,
            "arrival": stay_metadata.get("arrival", ""),
            "departure": stay_metadata.get("departure", ""),
            "period_number": str(period.period_number),
            "scheduled_date": period.start_date.isoformat(),
            "period_start": period.start_date.isoformat(),
            "period_end": period.end_date.isoformat(),
            "nights": str(period.nights),
        }
        result = self.create_payment_intent(
            amount_cents=to_cents(period.total_with_cc_fee),
            customer_id=customer_id,
            description=(
                f"{room_slug} | Period {period.period_number} "
                f"({period.start_date.isoformat()} to {period.end_date.isoformat()})"
            ),
            metadata=metadata,
            payment_method_id=payment_method_id,
            idempotency_key=f"period_{customer_id}_{stay_metadata.get('arrival', '')}_{period.period_number}",
        )

        return ScheduledCharge(
            period_number=period.period_number,
            payment_intent_id=result["payment_intent_id"],
            amount=period.total_with_cc_fee,
            scheduled_date=period.start_date,
        )

    @staticmethod
    def compute_payload_hash(payload: bytes) -> str:
        """Compute SHA-256 hash of webhook payload for deduplication."""
        return hashlib.sha256(payload).hexdigest()


@lru_cache(maxsize=1)
def get_stripe_service() -> StripeService:
    """Get the shared StripeService instance (singleton pattern)."""
    return StripeService()
