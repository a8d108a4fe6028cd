"""Availability models for property-management offers and checkout quotes."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .pricing import NightlyRate, PricingBreakdown


class RoomOffer(BaseModel):
    """Availability and rates for one room over a requested date range."""

    model_config = ConfigDict(frozen=True)

    room_id: int = Field(..., description="Property-management room ID")
    room_name: str = Field(..., description="Display name of the room")
    slug: str = Field(..., description="URL slug (room-<room_id>)", examples=["room-12345"])
    available: bool = Field(..., description="Whether the room is free for the range")
    price: Decimal | None = Field(
        default=None,
        description="Total price for the range, when published",
    )
    nightly_rates: list[NightlyRate] = Field(
        default_factory=list,
        description="Per-night rates in chronological order",
    )
    max_guests: int = Field(default=4, ge=1, description="Maximum occupancy")


class OffersResult(BaseModel):
    """Result of an availability lookup.

    Lookups never raise for remote failures; `success` is False and
    `error` carries the reason instead.
    """

    success: bool
    rooms: list[RoomOffer] = Field(default_factory=list)
    error: str | None = None


class RoomSummary(BaseModel):
    """Room details echoed on a checkout quote."""

    room_id: int
    name: str
    slug: str
    max_guests: int


class CheckoutQuote(BaseModel):
    """Price quote for a room and date range."""

    model_config = ConfigDict(frozen=True)

    room: RoomSummary
    arrival: dt.date
    departure: dt.date
    guests: int = Field(..., ge=1)
    pricing: PricingBreakdown
