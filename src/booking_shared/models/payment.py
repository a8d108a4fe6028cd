"""Payment models for card and ACH payment initiation.

Amounts are decimal currency units. Charge amounts are always derived
server-side from the nightly rates, never taken from the client.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import AchAccountType
from .pricing import NightlyRate, PricingBreakdown


class PaymentCreate(BaseModel):
    """Stay and guest details required to initiate a payment."""

    model_config = ConfigDict(str_strip_whitespace=True)

    room_slug: str = Field(..., min_length=1, examples=["room-12345"])
    arrival: dt.date
    departure: dt.date
    guests: int = Field(default=2, ge=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = ""
    nightly_rates: list[NightlyRate] = Field(
        ...,
        min_length=1,
        description="Nightly rates exactly as quoted to the guest",
    )

    @model_validator(mode="after")
    def check_rates_cover_stay(self) -> "PaymentCreate":
        """Require one rate per night from arrival to departure, in order."""
        if self.departure <= self.arrival:
            raise ValueError("departure must be after arrival")
        nights = (self.departure - self.arrival).days
        expected = [self.arrival + dt.timedelta(days=i) for i in range(nights)]
        if [rate.date for rate in self.nightly_rates] != expected:
            raise ValueError(
                "nightly_rates must list each night from arrival to departure exactly once, in order"
            )
        return self


class AchPaymentCreate(PaymentCreate):
    """Payment initiation by bank transfer (echeck)."""

    routing_number: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    account_type: AchAccountType = AchAccountType.CHECKING


class CardPaymentResult(BaseModel):
    """Card payment initiation result.

    The client confirms the PaymentIntent with `client_secret`; the booking
    is created by the webhook once the charge succeeds.
    """

    client_secret: str | None
    payment_intent_id: str
    customer_id: str
    charge_amount: Decimal
    is_recurring: bool = Field(
        ...,
        description="True when further billing periods will be charged later",
    )
    pricing: PricingBreakdown


class AchTransactionResult(BaseModel):
    """Outcome of a single echeck sale."""

    approved: bool
    transaction_id: str | None = None
    response_code: str | None = None
    message: str | None = None


class AchPaymentResult(BaseModel):
    """ACH payment result, returned after the booking is created."""

    success: bool = True
    transaction_id: str
    booking_id: str | None
    booking_error: str | None = Field(
        default=None,
        description="Set when the charge succeeded but the booking could not be created",
    )
    charge_amount: Decimal
    is_recurring: bool
    pricing: PricingBreakdown


class ScheduledCharge(BaseModel):
    """A future billing period prepared for off-session charging."""

    model_config = ConfigDict(frozen=True)

    period_number: int
    payment_intent_id: str
    amount: Decimal
    scheduled_date: dt.date
