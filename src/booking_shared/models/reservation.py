"""Reservation models for booking creation in the property-management system."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .enums import PaymentProvider


class ReservationCreate(BaseModel):
    """Data required to create a confirmed booking."""

    model_config = ConfigDict(frozen=True)

    room_id: int
    arrival: dt.date
    departure: dt.date
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    num_adults: int = Field(default=2, ge=1)
    total_price: Decimal = Field(..., ge=0, description="Amount charged so far")
    payment_provider: PaymentProvider
    payment_id: str = Field(..., description="Processor transaction reference")
    notes: str = Field(default="", description="Free-text booking notes")

    @property
    def guest_name(self) -> str:
        """Full guest name as shown in the booking."""
        return f"{self.first_name} {self.last_name}"


class BookingResult(BaseModel):
    """Result of a booking creation attempt."""

    success: bool
    booking_id: str | None = None
    error: str | None = None
