"""Availability endpoint for every room of the property.

Dates are accepted as YYYY-MM-DD or YYYYMMDD; check_out is exclusive.
"""

from fastapi import APIRouter, Depends, Query

from booking_api.dependencies import get_beds24
from booking_api.models.availability import AvailabilityResponse
from booking_api.models.common import parse_stay_date
from booking_shared.models.errors import BookingError, ErrorCode
from booking_shared.services.beds24 import Beds24Client

router = APIRouter(tags=["availability"])


@router.get(
    "/availability",
    summary="Check room availability",
    description="""
List every room of the property with its availability and nightly rates
for a date range.

**Notes:**
- Dates are YYYY-MM-DD or YYYYMMDD
- checkOut is exclusive (last night is checkOut - 1 day)
- Amounts are in currency units
""",
    response_model=AvailabilityResponse,
    responses={
        400: {"description": "Invalid or reversed dates"},
        502: {"description": "Availability provider failed"},
    },
)
async def check_availability(
    check_in: str = Query(..., alias="checkIn", examples=["2026-07-15"]),
    check_out: str = Query(..., alias="checkOut", examples=["2026-07-18"]),
    guests: int = Query(default=2, ge=1),
    beds24: Beds24Client = Depends(get_beds24),
) -> AvailabilityResponse:
    """Return offers for all rooms."""
    arrival = parse_stay_date(check_in, "checkIn")
    departure = parse_stay_date(check_out, "checkOut")
    if departure <= arrival:
        raise BookingError(
            ErrorCode.INVALID_DATES,
            details={"message": "checkOut must be after checkIn"},
        )

    offers = beds24.get_offers(arrival, departure, guests)
    if not offers.success:
        raise BookingError(
            ErrorCode.AVAILABILITY_ERROR,
            details={"message": offers.error or "Unknown availability error"},
        )

    return AvailabilityResponse(
        check_in=arrival,
        check_out=departure,
        guests=guests,
        nights=(departure - arrival).days,
        rooms=offers.rooms,
    )
