"""Checkout endpoint returning the price quote for a stay.

The quote's nightly rates are what the payment endpoints expect back, so
the amount charged always matches the amount shown.
"""

from fastapi import APIRouter, Depends, Query

from booking_api.dependencies import get_booking_service
from booking_api.models.common import parse_stay_date
from booking_shared.models.availability import CheckoutQuote
from booking_shared.services.booking import BookingService

router = APIRouter(tags=["checkout"])


@router.get(
    "/checkout",
    summary="Quote a stay",
    description="""
Price a stay in one room: nightly rates, tax, card fee, ACH total and,
for stays of 30 nights or more, the monthly billing schedule.

**Notes:**
- roomId is the room slug (room-<id>)
- Short stays are taxed and carry no card fee
- Long-term stays are tax exempt; card payments add a 3% fee
""",
    response_model=CheckoutQuote,
    responses={
        400: {"description": "Invalid room or dates, unit unavailable, or no rates"},
        502: {"description": "Availability provider failed"},
    },
)
async def checkout(
    room_id: str = Query(..., alias="roomId", examples=["room-12345"]),
    check_in: str = Query(..., alias="checkIn", examples=["2026-07-15"]),
    check_out: str = Query(..., alias="checkOut", examples=["2026-07-18"]),
    guests: int = Query(default=2, ge=1),
    service: BookingService = Depends(get_booking_service),
) -> CheckoutQuote:
    """Build the checkout quote."""
    return service.quote(
        room_id,
        parse_stay_date(check_in, "checkIn"),
        parse_stay_date(check_out, "checkOut"),
        guests,
    )
