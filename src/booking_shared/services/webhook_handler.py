"""Webhook handler for processing Stripe events.

Provides business logic for handling webhook events separate from
HTTP routing concerns. A successful first payment creates the booking in
Beds24; for long-term stays it also prepares one PaymentIntent per
remaining billing period on the guest's saved card.
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from booking_shared.models.enums import ChargeType, PaymentProvider
from booking_shared.models.payment import ScheduledCharge
from booking_shared.models.reservation import ReservationCreate
from booking_shared.models.stripe_webhook import StripeWebhookEvent, WebhookOutcome
from booking_shared.utils.logging import get_logger, log_webhook_event

from .beds24 import Beds24Client
from .dynamodb import DynamoDBService, get_dynamodb_service
from .stripe_service import StripeService, StripeServiceError, decode_schedule_metadata

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"

# Charge types whose success creates a booking
BOOKING_CHARGE_TYPES = {
    ChargeType.SHORT_TERM_FULL_PAYMENT.value,
    ChargeType.LONG_TERM_FIRST_PAYMENT.value,
}


class WebhookHandler:
    """Handler for processing Stripe webhook events.

    Each event id is claimed in DynamoDB with a conditional write before
    any side effect, so concurrent or repeated deliveries of one event
    create at most one booking.
    """

    WEBHOOK_EVENTS_TABLE = "stripe-webhook-events"

    def __init__(
        self,
        stripe: StripeService,
        beds24: Beds24Client,
        db: DynamoDBService | None = None,
    ) -> None:
        """Initialize webhook handler.

        Args:
            stripe: Stripe service used to schedule later billing periods
            beds24: Client used to create bookings
            db: DynamoDB service. Defaults to the shared instance.
        """
        self._stripe = stripe
        self._beds24 = beds24
        self._db = db or get_dynamodb_service()

    def claim_event(self, event_id: str, event_type: str, payload_hash: str) -> bool:
        """Claim an event for processing.

        Args:
            event_id: Stripe event ID
            event_type: Stripe event type
            payload_hash: SHA-256 hash of the raw payload

        Returns:
            True if this delivery owns the event, False if it was already
            claimed by an earlier or concurrent delivery
        """
        record = StripeWebhookEvent(
            event_id=event_id,
            event_type=event_type,
            processed_at=dt.datetime.now(dt.UTC),
            payload_hash=payload_hash,
            processing_result="processing",
        )
        return self._db.put_new_item(self.WEBHOOK_EVENTS_TABLE, record.to_item(), "event_id")

    def release_event(self, event_id: str) -> None:
        """Drop a claim so a redelivery of the event is processed again."""
        self._db.delete_item(self.WEBHOOK_EVENTS_TABLE, {"event_id": event_id})

    def log_event(
        self,
        event_id: str,
        event_type: str,
        payload_hash: str,
        outcome: WebhookOutcome,
    ) -> None:
        """Replace the claim with the final outcome for the audit trail."""
        record = StripeWebhookEvent(
            event_id=event_id,
            event_type=event_type,
            processed_at=dt.datetime.now(dt.UTC),
            payload_hash=payload_hash,
            payment_intent_id=outcome.payment_intent_id,
            booking_id=outcome.booking_id,
            processing_result=outcome.processing_result,
            error_message=outcome.message if outcome.processing_result == "error" else None,
        )
        self._db.put_item(self.WEBHOOK_EVENTS_TABLE, record.to_item())

    def handle_event(self, event: dict[str, Any], payload_hash: str) -> WebhookOutcome:
        """Process a verified Stripe event at most once.

        If processing raises, the claim is released and the exception
        propagates so Stripe's retry can process the event again.

        Args:
            event: Parsed Stripe webhook event
            payload_hash: SHA-256 hash of the raw payload

        Returns:
            WebhookOutcome describing what was done
        """
        event_id = event.get("id", "")
        event_type = event.get("type", "")
        log_webhook_event(logger, event_type, event_id, result="received")

        if not self.claim_event(event_id, event_type, payload_hash):
            log_webhook_event(logger, event_type, event_id, result="duplicate")
            return WebhookOutcome(
                processing_result="duplicate",
                message="Event already processed",
            )

        intent = (event.get("data") or {}).get("object") or {}
        try:
            if event_type == PAYMENT_SUCCEEDED:
                outcome = self.process_payment_succeeded(intent)
            elif event_type == PAYMENT_FAILED:
                outcome = self.process_payment_failed(intent)
            else:
                outcome = WebhookOutcome(
                    processing_result="skipped",
                    message=f"Event type '{event_type}' not handled",
                )
        except Exception:
            logger.exception("Processing event %s failed; releasing claim", event_id)
            self.release_event(event_id)
            raise

        self.log_event(event_id, event_type, payload_hash, outcome)
        log_webhook_event(
            logger,
            event_type,
            event_id,
            payment_intent_id=outcome.payment_intent_id,
            booking_id=outcome.booking_id,
            result=outcome.processing_result,
            error=outcome.message if outcome.processing_result == "error" else None,
        )
        return outcome

    def process_payment_succeeded(self, intent: dict[str, Any]) -> WebhookOutcome:
        """Process payment_intent.succeeded.

        Args:
            intent: PaymentIntent object from the event

        Returns:
            WebhookOutcome with the created booking, if any
        """
        intent_id = intent.get("id")
        metadata = intent.get("metadata") or {}
        charge_type = metadata.get("type")

        if charge_type == ChargeType.RECURRING_PAYMENT.value:
            logger.info(
                "Recurring payment %s succeeded for period %s of room %s",
                intent_id,
                metadata.get("period_number"),
                metadata.get("room_slug"),
            )
            return WebhookOutcome(processing_result="success", payment_intent_id=intent_id)

        if charge_type not in BOOKING_CHARGE_TYPES:
            return WebhookOutcome(
                processing_result="skipped",
                message=f"Payment type '{charge_type}' not handled",
                payment_intent_id=intent_id,
            )

        try:
            details = self._reservation_from_intent(intent)
        except (KeyError, ValueError) as e:
            logger.error("PaymentIntent %s has unusable metadata: %s", intent_id, e)
            return WebhookOutcome(
                processing_result="error",
                message=f"Invalid booking metadata: {e}",
                payment_intent_id=intent_id,
            )

        booking = self._beds24.create_booking(details)
        if not booking.success:
            # The charge stands; staff reconcile using the PaymentIntent ID.
            logger.error(
                "Booking creation failed after payment %s: %s",
                intent_id,
                booking.error,
            )
            return WebhookOutcome(
                processing_result="error",
                message=booking.error or "Booking creation failed",
                payment_intent_id=intent_id,
            )

        scheduled: list[ScheduledCharge] = []
        if charge_type == ChargeType.LONG_TERM_FIRST_PAYMENT.value:
            scheduled = self.schedule_remaining_periods(intent)

        return WebhookOutcome(
            processing_result="success",
            payment_intent_id=intent_id,
            booking_id=booking.booking_id,
            scheduled_charges=scheduled,
        )

    def process_payment_failed(self, intent: dict[str, Any]) -> WebhookOutcome:
        """Process payment_intent.payment_failed (logged only)."""
        intent_id = intent.get("id")
        last_error = intent.get("last_payment_error") or {}
        message = last_error.get("message") or "Payment failed"
        metadata = intent.get("metadata") or {}

        logger.warning(
            "Payment %s failed (type=%s, room=%s): %s",
            intent_id,
            metadata.get("type"),
            metadata.get("room_slug"),
            message,
        )
        return WebhookOutcome(
            processing_result="success",
            message=message,
            payment_intent_id=intent_id,
        )

    def schedule_remaining_periods(self, intent: dict[str, Any]) -> list[ScheduledCharge]:
        """Prepare charges for every future billing period of a long-term stay.

        Failures are logged per period and never retried.

        Args:
            intent: The succeeded first-period PaymentIntent

        Returns:
            Charges that were prepared
        """
        intent_id = intent.get("id")
        metadata = intent.get("metadata") or {}
        customer_id = intent.get("customer")

        try:
            periods = decode_schedule_metadata(metadata)
        except ValueError as e:
            logger.error("Cannot read billing schedule of %s: %s", intent_id, e)
            return []
        if not periods or not customer_id:
            return []

        try:
            payment_method_id = intent.get("payment_method") or self._stripe.get_saved_card(
                customer_id
            )
        except StripeServiceError as e:
            logger.error("Saved card lookup failed for %s: %s", customer_id, e)
            return []
        if not payment_method_id:
            logger.error(
                "No saved card for customer %s; %d periods not scheduled",
                customer_id,
                len(periods),
            )
            return []

        today = dt.datetime.now(dt.UTC).date()
        scheduled = []
        for period in periods:
            if period.start_date <= today:
                logger.warning(
                    "Period %d of %s starts %s and is not scheduled",
                    period.period_number,
                    intent_id,
                    period.start_date,
                )
                continue
            try:
                charge = self._stripe.schedule_period_charge(
                    customer_id=customer_id,
                    payment_method_id=payment_method_id,
                    period=period,
                    stay_metadata=metadata,
                )
            except StripeServiceError as e:
                logger.error(
                    "Failed to schedule period %d of %s: %s",
                    period.period_number,
                    intent_id,
                    e,
                )
                continue
            logger.info(
                "Scheduled period %d (%s) for %s as %s",
                charge.period_number,
                charge.amount,
                charge.scheduled_date,
                charge.payment_intent_id,
            )
            scheduled.append(charge)
        return scheduled

    @staticmethod
    def _reservation_from_intent(intent: dict[str, Any]) -> ReservationCreate:
        """Build booking details from a first-payment PaymentIntent."""
        metadata = intent.get("metadata") or {}
        amount_cents = intent.get("amount_received") or intent.get("amount") or 0

        if metadata.get("type") == ChargeType.LONG_TERM_FIRST_PAYMENT.value:
            notes = f"Card payment. Period 1/{metadata.get('total_periods', '?')}"
        else:
            notes = f"Card payment. {metadata.get('nights', '?')} nights"

        return ReservationCreate(
            room_id=int(metadata["room_id"]),
            arrival=dt.date.fromisoformat(metadata["arrival"]),
            departure=dt.date.fromisoformat(metadata["departure"]),
            first_name=metadata.get("first_name", ""),
            last_name=metadata.get("last_name", ""),
            email=metadata.get("email", ""),
            phone=metadata.get("phone", ""),
            num_adults=int(metadata.get("guests") or 2),
            total_price=Decimal(amount_cents) / 100,
            payment_provider=PaymentProvider.STRIPE,
            payment_id=intent["id"],
            notes=notes,
        )
