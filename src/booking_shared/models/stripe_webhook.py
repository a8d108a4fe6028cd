"""Stripe webhook event model for idempotency and auditing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .payment import ScheduledCharge


class StripeWebhookEvent(BaseModel):
    """Log of a received Stripe webhook event.

    Used for:
    - Idempotency: prevent creating the same booking twice
    - Auditing: track all webhook deliveries
    """

    model_config = ConfigDict(strict=True)

    event_id: str = Field(
        ...,
        description="Stripe event ID (evt_xxx)",
        examples=["evt_1ABC123DEF456"],
    )
    event_type: str = Field(
        ...,
        description="Stripe event type",
        examples=["payment_intent.succeeded", "payment_intent.payment_failed"],
    )
    processed_at: datetime = Field(
        ...,
        description="When the event was processed",
    )
    payload_hash: str = Field(
        ...,
        description="SHA-256 hash of payload for deduplication",
    )
    payment_intent_id: str | None = Field(
        default=None,
        description="PaymentIntent the event refers to",
    )
    booking_id: str | None = Field(
        default=None,
        description="Booking created while processing the event",
    )
    processing_result: str = Field(
        default="success",
        description="Result of processing: processing (claimed), success, skipped, error",
    )
    error_message: str | None = Field(
        default=None,
        description="Error details if processing failed",
    )

    def to_item(self) -> dict[str, str]:
        """Convert to a DynamoDB item, omitting empty optional fields."""
        item = {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "processed_at": self.processed_at.isoformat(),
            "payload_hash": self.payload_hash,
            "processing_result": self.processing_result,
        }
        if self.payment_intent_id:
            item["payment_intent_id"] = self.payment_intent_id
        if self.booking_id:
            item["booking_id"] = self.booking_id
        if self.error_message:
            item["error_message"] = self.error_message
        return item


class WebhookOutcome(BaseModel):
    """Result of handling one webhook event."""

    processing_result: str = Field(
        ...,
        description="success, duplicate, skipped or error",
    )
    message: str | None = None
    payment_intent_id: str | None = None
    booking_id: str | None = None
    scheduled_charges: list[ScheduledCharge] = Field(default_factory=list)
