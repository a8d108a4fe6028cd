"""Webhook endpoints for external service integrations.

Provides endpoints for:
- Stripe webhook events (payment_intent.succeeded, payment_intent.payment_failed)

These endpoints require no authentication; payloads are verified with the
Stripe signing secret.
"""

from fastapi import APIRouter, Depends, Request

from booking_api.dependencies import get_stripe, get_webhook_handler
from booking_api.models.webhooks import WebhookErrorResponse, WebhookResponse
from booking_shared.models.errors import BookingError, ErrorCode
from booking_shared.services.stripe_service import StripeService, StripeServiceError
from booking_shared.services.webhook_handler import WebhookHandler
from booking_shared.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/webhooks/stripe",
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- payment_intent.succeeded: Creates the booking; for long-term stays,
  prepares charges for the remaining billing periods
- payment_intent.payment_failed: Logged

**No authentication required** - signature is verified using Stripe webhook secret.

**Idempotent**: Duplicate events (same event_id) return 200 with 'duplicate' result.
""",
    response_model=WebhookResponse,
    responses={
        200: {
            "description": "Event received and processed (or acknowledged)",
            "model": WebhookResponse,
        },
        400: {
            "description": "Invalid signature or missing header",
            "model": WebhookErrorResponse,
        },
    },
)
async def handle_stripe_webhook(
    request: Request,
    stripe: StripeService = Depends(get_stripe),
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookResponse:
    """Verify the signature and process the event once."""
    signature = request.headers.get("Stripe-Signature")
    if not signature:
        logger.warning("Webhook request missing Stripe-Signature header")
        raise BookingError(
            code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": "Missing Stripe-Signature header"},
        )

    # Signature is computed over the raw body
    payload = await request.body()

    try:
        event = stripe.verify_webhook_signature(payload, signature)
    except StripeServiceError as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise BookingError(
            code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": "Invalid webhook signature"},
        ) from e

    outcome = handler.handle_event(event, StripeService.compute_payload_hash(payload))

    return WebhookResponse(
        received=True,
        event_id=event.get("id"),
        event_type=event.get("type"),
        processing_result=outcome.processing_result,
        booking_id=outcome.booking_id,
        message=outcome.message,
    )
