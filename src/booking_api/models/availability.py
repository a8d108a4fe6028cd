"""API models for the availability endpoint."""

import datetime as dt

from pydantic import BaseModel, Field

from booking_shared.models.availability import RoomOffer


class AvailabilityResponse(BaseModel):
    """Availability and nightly rates of every room for a date range."""

    success: bool = True
    check_in: dt.date
    check_out: dt.date
    guests: int
    nights: int = Field(..., description="Nights in the requested range")
    rooms: list[RoomOffer]
