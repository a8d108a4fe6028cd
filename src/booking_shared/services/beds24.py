"""Beds24 client for availability, nightly rates and booking creation.

The V2 API serves offers and calendar prices; booking creation still goes
through the V1 JSON API. Credentials are read from SSM under
/booking/{environment}/beds24/.
"""

import datetime as dt
import logging
import os
import re
from decimal import Decimal
from functools import lru_cache
from typing import Any

import httpx
from pydantic import ValidationError

from booking_shared.models.availability import OffersResult, RoomOffer
from booking_shared.models.pricing import NightlyRate
from booking_shared.models.reservation import BookingResult, ReservationCreate

from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

BEDS24_API_URL = "https://beds24.com/api"
DEFAULT_PROPERTY_ID = 5780
DEFAULT_MAX_GUESTS = 4
BOOKING_STATUS_CONFIRMED = 1

_ROOM_SLUG_RE = re.compile(r"^room-(\d+)$")


def room_slug(room_id: int) -> str:
    """URL slug for a room."""
    return f"room-{room_id}"


def parse_room_slug(slug: str) -> int | None:
    """Extract the Beds24 room ID from a slug, or None if malformed."""
    match = _ROOM_SLUG_RE.match(slug.strip())
    return int(match.group(1)) if match else None


class Beds24Client:
    """Client for the Beds24 property-management API.

    Remote failures never raise out of the public methods: they are logged
    and reported through the result objects so route handlers can answer
    with a generic message.
    """

    def __init__(
        self,
        property_id: int | None = None,
        environment: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the Beds24 client.

        Args:
            property_id: Beds24 property ID. Defaults to BEDS24_PROPERTY_ID env var.
            environment: Environment name for SSM secrets.
            http_client: Optional preconfigured httpx client (used in tests).
        """
        self.property_id = property_id or int(
            os.environ.get("BEDS24_PROPERTY_ID", DEFAULT_PROPERTY_ID)
        )
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self._base_url = os.environ.get("BEDS24_API_URL", BEDS24_API_URL).rstrip("/")
        self._ssm = get_ssm_service()
        self._http = http_client or httpx.Client(timeout=30.0)

    def _secret(self, name: str) -> str:
        return self._ssm.get_integration_secret("beds24", name, self._environment)

    # V2 API: offers and calendar

    def get_offers(self, check_in: dt.date, check_out: dt.date, guests: int = 2) -> OffersResult:
        """Get availability and nightly rates for every room of the property.

        Args:
            check_in: Arrival date
            check_out: Departure date (exclusive)
            guests: Number of adults

        Returns:
            OffersResult with one RoomOffer per room
        """
        try:
            response = self._http.post(
                f"{self._base_url}/v2/inventory/offers",
                headers={"token": self._secret("v2_token")},
                json={
                    "propId": self.property_id,
                    "checkIn": check_in.isoformat(),
                    "checkOut": check_out.isoformat(),
                    "numAdult": guests,
                },
            )
            if response.status_code >= 400:
                return OffersResult(success=False, error=f"API error: {response.status_code}")

            data = response.json()
            if not data.get("success") or not data.get("data"):
                return OffersResult(success=False, error=data.get("error") or "No rooms found")

            rooms = [self._offer_to_room(offer) for offer in data["data"]]
            return OffersResult(success=True, rooms=rooms)

        except (httpx.HTTPError, SSMServiceError, ValidationError, KeyError, ValueError) as e:
            logger.error("Beds24 offers request failed: %s", e)
            return OffersResult(success=False, error=str(e))

    def _offer_to_room(self, offer: dict[str, Any]) -> RoomOffer:
        """Convert a Beds24 offer to a RoomOffer."""
        room_id = int(offer["roomId"])
        price = offer.get("price")
        return RoomOffer(
            room_id=room_id,
            room_name=offer.get("roomName") or f"Room {room_id}",
            slug=room_slug(room_id),
            available=offer.get("available") is True,
            price=Decimal(str(price)) if price else None,
            nightly_rates=[
                NightlyRate.model_validate(rate) for rate in offer.get("nightlyRates") or []
            ],
            max_guests=int(offer.get("maxPeople") or DEFAULT_MAX_GUESTS),
        )

    def get_calendar_rates(
        self,
        room_id: int,
        check_in: dt.date,
        check_out: dt.date,
    ) -> list[NightlyRate]:
        """Get published calendar prices for each night of a stay.

        Args:
            room_id: Beds24 room ID
            check_in: Arrival date
            check_out: Departure date (exclusive)

        Returns:
            One NightlyRate per night, or an empty list if any night has
            no published price or the request fails
        """
        last_night = check_out - dt.timedelta(days=1)
        try:
            response = self._http.get(
                f"{self._base_url}/v2/inventory/rooms/calendar",
                headers={"token": self._secret("v2_token")},
                params={
                    "roomId": room_id,
                    "startDate": check_in.isoformat(),
                    "endDate": last_night.isoformat(),
                    "includePrices": "true",
                },
            )
            if response.status_code >= 400:
                logger.warning("Beds24 calendar request failed: HTTP %s", response.status_code)
                return []
            data = response.json()
        except (httpx.HTTPError, SSMServiceError, ValueError) as e:
            logger.error("Beds24 calendar request failed: %s", e)
            return []

        try:
            prices = self._expand_calendar(data)
        except (KeyError, ValueError) as e:
            logger.error("Unreadable Beds24 calendar response: %s", e)
            return []

        nights = (check_out - check_in).days
        rates = []
        for offset in range(nights):
            night = check_in + dt.timedelta(days=offset)
            if night not in prices:
                logger.warning("No calendar price for room %s on %s", room_id, night)
                return []
            rates.append(NightlyRate(date=night, rate=prices[night]))
        return rates

    @staticmethod
    def _expand_calendar(data: dict[str, Any]) -> dict[dt.date, Decimal]:
        """Expand calendar price ranges into a per-date price map."""
        prices: dict[dt.date, Decimal] = {}
        for room in data.get("data") or []:
            for entry in room.get("calendar") or []:
                price = entry.get("price1")
                if price is None:
                    continue
                day = dt.date.fromisoformat(entry["from"])
                until = dt.date.fromisoformat(entry.get("to") or entry["from"])
                while day <= until:
                    prices[day] = Decimal(str(price))
                    day += dt.timedelta(days=1)
        return prices

    # V1 API: booking creation

    def create_booking(self, details: ReservationCreate) -> BookingResult:
        """Create a confirmed booking.

        Args:
            details: Guest, stay and payment details

        Returns:
            BookingResult with the Beds24 booking ID on success
        """
        try:
            body = {
                "authentication": {"apiKey": self._secret("api_key")},
                "booking": {
                    "roomId": details.room_id,
                    "arrival": details.arrival.isoformat(),
                    "departure": details.departure.isoformat(),
                    "numAdult": details.num_adults,
                    "guestFirstName": details.first_name,
                    "guestName": details.guest_name,
                    "guestEmail": details.email,
                    "guestPhone": details.phone,
                    "price": float(details.total_price),
                    "status": BOOKING_STATUS_CONFIRMED,
                    "notes": details.notes,
                    "referer": f"{details.payment_provider.value}:{details.payment_id}",
                },
            }
            response = self._http.post(f"{self._base_url}/json/setBooking", json=body)
            data = response.json()
        except (httpx.HTTPError, SSMServiceError, ValueError) as e:
            logger.error("Beds24 booking request failed: %s", e)
            return BookingResult(success=False, error=str(e))

        if data.get("success") and data.get("bookingId"):
            logger.info("Beds24 booking created: %s", data["bookingId"])
            return BookingResult(success=True, booking_id=str(data["bookingId"]))

        return BookingResult(success=False, error=data.get("error") or "Booking creation failed")


@lru_cache(maxsize=1)
def get_beds24_client() -> Beds24Client:
    """Get the shared Beds24Client instance (singleton pattern)."""
    return Beds24Client()
