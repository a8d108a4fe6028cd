"""Payment endpoints.

Provides REST endpoints for:
- Starting a card payment (Stripe PaymentIntent, confirmed client-side)
- Paying by bank transfer (Forte echeck, booking created immediately)

Long-term stays pay only the first billing period here.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from booking_api.dependencies import get_booking_service
from booking_api.models.payments import FortePaymentRequest, StripePaymentRequest
from booking_shared.models.payment import AchPaymentResult, CardPaymentResult
from booking_shared.services.booking import BookingService

router = APIRouter(tags=["payments"])


@router.post(
    "/payments/stripe",
    summary="Start card payment",
    description="""
Create a Stripe customer and PaymentIntent for the stay.

The client confirms the PaymentIntent with the returned `client_secret`.
The booking is created by the Stripe webhook once the payment succeeds.

**Notes:**
- Amount is recomputed from the nightly rates (not user-provided)
- Long-term stays charge period 1 and save the card for later periods
""",
    response_model=CardPaymentResult,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid room"},
        502: {"description": "Stripe request failed"},
    },
)
async def start_stripe_payment(
    body: StripePaymentRequest,
    service: BookingService = Depends(get_booking_service),
) -> CardPaymentResult:
    """Start a card payment."""
    return service.start_card_payment(body)


@router.post(
    "/payments/forte",
    summary="Pay by bank transfer",
    description="""
Charge a bank account through a Forte echeck sale and create the booking.

**Notes:**
- Amount is recomputed from the nightly rates (not user-provided)
- No card fee is ever charged on ACH payments
- If the booking cannot be created after a successful charge, the
  response carries `booking_error` and the transaction ID
""",
    response_model=AchPaymentResult,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid room"},
        402: {"description": "Bank transfer declined"},
        502: {"description": "Forte request failed"},
    },
)
async def pay_with_forte(
    body: FortePaymentRequest,
    service: BookingService = Depends(get_booking_service),
) -> AchPaymentResult:
    """Charge by ACH and create the booking."""
    return service.pay_by_ach(body)
