"""Booking service for checkout quotes and payment initiation.

Every payment path re-reads the nightly rates from Beds24, checks them
against the rates the guest was quoted and recomputes the breakdown from
them. Client-supplied totals are never accepted, so the amount charged
always equals the amount quoted for the same stay.
"""

import datetime as dt

from booking_shared.models.availability import CheckoutQuote, RoomOffer, RoomSummary
from booking_shared.models.enums import ChargeType, PaymentProvider
from booking_shared.models.errors import (
    BookingError,
    ErrorCode,
    get_user_friendly_stripe_message,
)
from booking_shared.models.payment import (
    AchPaymentCreate,
    AchPaymentResult,
    CardPaymentResult,
    PaymentCreate,
)
from booking_shared.models.pricing import NightlyRate, PricingBreakdown
from booking_shared.models.reservation import ReservationCreate
from booking_shared.utils.logging import get_logger, log_payment_operation

from .beds24 import Beds24Client, parse_room_slug
from .forte_service import ForteService, ForteServiceError
from .pricing import (
    PricingEngine,
    ach_charge_amount,
    card_charge_amount,
    remaining_periods,
    round2,
    to_cents,
)
from .stripe_service import StripeService, StripeServiceError, encode_schedule_metadata

logger = get_logger(__name__)


class BookingService:
    """Service for quoting stays and starting card or ACH payments."""

    def __init__(
        self,
        beds24: Beds24Client,
        pricing: PricingEngine,
        stripe: StripeService,
        forte: ForteService,
    ) -> None:
        """Initialize booking service.

        Args:
            beds24: Property-management client
            pricing: Pricing engine shared by quotes and payments
            stripe: Card processor
            forte: ACH processor
        """
        self.beds24 = beds24
        self.pricing = pricing
        self.stripe = stripe
        self.forte = forte

    # Quotes

    def resolve_room(self, slug: str) -> int:
        """Map a room slug to its Beds24 room ID.

        Raises:
            BookingError: INVALID_ROOM if the slug is malformed
        """
        room_id = parse_room_slug(slug)
        if room_id is None:
            raise BookingError(ErrorCode.INVALID_ROOM, details={"room": slug})
        return room_id

    def find_offer(
        self,
        room_id: int,
        check_in: dt.date,
        check_out: dt.date,
        guests: int,
    ) -> RoomOffer:
        """Find the available offer for a room.

        Raises:
            BookingError: INVALID_DATES, AVAILABILITY_ERROR or DATES_UNAVAILABLE
        """
        if check_out <= check_in:
            raise BookingError(
                ErrorCode.INVALID_DATES,
                details={"message": "check_out must be after check_in"},
            )

        offers = self.beds24.get_offers(check_in, check_out, guests)
        if not offers.success:
            raise BookingError(
                ErrorCode.AVAILABILITY_ERROR,
                details={"message": offers.error or "Unknown availability error"},
            )

        offer = next((room for room in offers.rooms if room.room_id == room_id), None)
        if offer is None or not offer.available:
            raise BookingError(ErrorCode.DATES_UNAVAILABLE, details={"room_id": str(room_id)})
        return offer

    def resolve_nightly_rates(
        self,
        offer: RoomOffer,
        check_in: dt.date,
        check_out: dt.date,
    ) -> list[NightlyRate]:
        """Get per-night rates for an offer.

        Falls back to calendar prices, then to the offer total spread
        evenly over the nights, when the offer carries no nightly rates.

        Raises:
            BookingError: RATES_UNAVAILABLE if no rates can be determined
        """
        if offer.nightly_rates:
            return list(offer.nightly_rates)

        nights = (check_out - check_in).days
        if offer.price:
            calendar_rates = self.beds24.get_calendar_rates(offer.room_id, check_in, check_out)
            if calendar_rates:
                return calendar_rates

            average = round2(offer.price / nights)
            logger.warning(
                "Spreading total price %s evenly over %d nights for room %s",
                offer.price,
                nights,
                offer.room_id,
            )
            return [
                NightlyRate(date=check_in + dt.timedelta(days=i), rate=average)
                for i in range(nights)
            ]

        raise BookingError(ErrorCode.RATES_UNAVAILABLE, details={"room_id": str(offer.room_id)})

    def quote(
        self,
        slug: str,
        check_in: dt.date,
        check_out: dt.date,
        guests: int = 2,
    ) -> CheckoutQuote:
        """Build a checkout quote for a room and date range.

        Args:
            slug: Room slug (room-<id>)
            check_in: Arrival date
            check_out: Departure date
            guests: Number of guests

        Returns:
            CheckoutQuote with the full price breakdown

        Raises:
            BookingError: If the room, dates or rates are not usable
        """
        room_id = self.resolve_room(slug)
        offer = self.find_offer(room_id, check_in, check_out, guests)
        rates = self.resolve_nightly_rates(offer, check_in, check_out)

        return CheckoutQuote(
            room=RoomSummary(
                room_id=room_id,
                name=offer.room_name,
                slug=offer.slug,
                max_guests=offer.max_guests,
            ),
            arrival=check_in,
            departure=check_out,
            guests=guests,
            pricing=self.pricing.compute_breakdown(rates),
        )

    # Payments

    def verify_quoted_rates(self, room_id: int, request: PaymentCreate) -> list[NightlyRate]:
        """Re-resolve a stay's rates and check them against the submitted quote.

        The returned rates, not the submitted ones, are what gets charged.

        Raises:
            BookingError: INVALID_DATES, AVAILABILITY_ERROR, DATES_UNAVAILABLE,
                RATES_UNAVAILABLE, or RATES_CHANGED when the quote is stale
        """
        offer = self.find_offer(room_id, request.arrival, request.departure, request.guests)
        rates = self.resolve_nightly_rates(offer, request.arrival, request.departure)

        submitted = [(rate.date, rate.rate) for rate in request.nightly_rates]
        if [(rate.date, rate.rate) for rate in rates] != submitted:
            logger.warning(
                "Submitted rates for %s %s to %s differ from current rates",
                request.room_slug,
                request.arrival,
                request.departure,
            )
            raise BookingError(ErrorCode.RATES_CHANGED, details={"room": request.room_slug})
        return rates

    def start_card_payment(self, request: PaymentCreate) -> CardPaymentResult:
        """Create a Stripe customer and PaymentIntent for a stay.

        Long-term stays charge the first billing period now, save the card
        and carry the remaining periods in the intent metadata. The booking
        itself is created by the webhook once the payment succeeds.

        Raises:
            BookingError: INVALID_ROOM, STRIPE_API_ERROR, or any error from
                verify_quoted_rates
        """
        room_id = self.resolve_room(request.room_slug)
        breakdown = self.pricing.compute_breakdown(self.verify_quoted_rates(room_id, request))
        charge_amount = card_charge_amount(breakdown)
        period_count = len(breakdown.billing_schedule or [])

        stay_metadata = {
            "room_id": str(room_id),
            "room_slug": request.room_slug,
            "arrival": request.arrival.isoformat(),
            "departure": request.departure.isoformat(),
            "guests": str(request.guests),
        }
        charge_type = (
            ChargeType.LONG_TERM_FIRST_PAYMENT
            if breakdown.is_long_term
            else ChargeType.SHORT_TERM_FULL_PAYMENT
        )
        metadata = {
            "type": charge_type.value,
            **stay_metadata,
            "first_name": request.first_name,
            "last_name": request.last_name,
            "email": request.email,
            "phone": request.phone,
            "nights": str(breakdown.nights),
        }
        description = f"{request.room_slug} | {request.arrival} to {request.departure}"
        if breakdown.is_long_term:
            metadata["total_periods"] = str(period_count)
            metadata.update(encode_schedule_metadata(remaining_periods(breakdown)))
            description += f" | Period 1/{period_count}"

        try:
            customer_id = self.stripe.create_customer(
                email=request.email,
                name=f"{request.first_name} {request.last_name}",
                phone=request.phone or None,
                metadata=stay_metadata,
            )
            intent = self.stripe.create_payment_intent(
                amount_cents=to_cents(charge_amount),
                customer_id=customer_id,
                description=description,
                receipt_email=request.email,
                metadata=metadata,
                save_card=breakdown.is_long_term,
            )
        except StripeServiceError as e:
            log_payment_operation(
                logger,
                "create_payment_intent",
                provider=PaymentProvider.STRIPE.value,
                room_slug=request.room_slug,
                amount=charge_amount,
                error=str(e),
            )
            raise BookingError(
                ErrorCode.STRIPE_API_ERROR,
                details={"message": get_user_friendly_stripe_message(e.stripe_error_code)},
            ) from e

        log_payment_operation(
            logger,
            "create_payment_intent",
            provider=PaymentProvider.STRIPE.value,
            transaction_id=intent["payment_intent_id"],
            room_slug=request.room_slug,
            amount=charge_amount,
            status="pending",
            charge_type=charge_type.value,
        )

        return CardPaymentResult(
            client_secret=intent["client_secret"],
            payment_intent_id=intent["payment_intent_id"],
            customer_id=customer_id,
            charge_amount=charge_amount,
            is_recurring=breakdown.is_long_term and period_count > 1,
            pricing=breakdown,
        )

    def pay_by_ach(self, request: AchPaymentCreate) -> AchPaymentResult:
        """Charge a bank account through Forte and create the booking.

        Raises:
            BookingError: INVALID_ROOM, ACH_API_ERROR, ACH_DECLINED, or any error
                from verify_quoted_rates
        """
        room_id = self.resolve_room(request.room_slug)
        breakdown = self.pricing.compute_breakdown(self.verify_quoted_rates(room_id, request))
        charge_amount = ach_charge_amount(breakdown)

        try:
            transaction = self.forte.create_echeck_sale(
                amount=charge_amount,
                first_name=request.first_name,
                last_name=request.last_name,
                routing_number=request.routing_number,
                account_number=request.account_number,
                account_type=request.account_type,
            )
        except ForteServiceError as e:
            log_payment_operation(
                logger,
                "echeck_sale",
                provider=PaymentProvider.FORTE.value,
                room_slug=request.room_slug,
                amount=charge_amount,
                error=str(e),
            )
            raise BookingError(ErrorCode.ACH_API_ERROR) from e

        if not transaction.approved or not transaction.transaction_id:
            log_payment_operation(
                logger,
                "echeck_sale",
                provider=PaymentProvider.FORTE.value,
                room_slug=request.room_slug,
                amount=charge_amount,
                error=transaction.message or "declined",
            )
            raise BookingError(
                ErrorCode.ACH_DECLINED,
                details={"message": transaction.message or "ACH payment declined"},
            )

        log_payment_operation(
            logger,
            "echeck_sale",
            provider=PaymentProvider.FORTE.value,
            transaction_id=transaction.transaction_id,
            room_slug=request.room_slug,
            amount=charge_amount,
            status="completed",
        )

        booking = self.beds24.create_booking(
            ReservationCreate(
                room_id=room_id,
                arrival=request.arrival,
                departure=request.departure,
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email,
                phone=request.phone,
                num_adults=request.guests,
                total_price=charge_amount,
                payment_provider=PaymentProvider.FORTE,
                payment_id=transaction.transaction_id,
                notes=self._ach_notes(breakdown),
            )
        )
        if not booking.success:
            # The charge stands; staff reconcile using the transaction ID.
            logger.error(
                "Booking creation failed after ACH transaction %s: %s",
                transaction.transaction_id,
                booking.error,
            )

        return AchPaymentResult(
            transaction_id=transaction.transaction_id,
            booking_id=booking.booking_id,
            booking_error=None if booking.success else (booking.error or "Booking creation failed"),
            charge_amount=charge_amount,
            is_recurring=breakdown.is_long_term,
            pricing=breakdown,
        )

    @staticmethod
    def _ach_notes(breakdown: PricingBreakdown) -> str:
        if breakdown.is_long_term:
            return f"ACH payment. Period 1/{len(breakdown.billing_schedule or [])}"
        return f"ACH payment. {breakdown.nights} nights"
