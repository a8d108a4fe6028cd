"""Pydantic models for the studio booking backend."""

from .availability import CheckoutQuote, OffersResult, RoomOffer, RoomSummary
from .enums import (
    AchAccountType,
    ChargeType,
    PaymentProvider,
)
from .errors import (
    BookingError,
    ErrorCode,
    ErrorResponse,
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    STRIPE_ERROR_MESSAGES,
    get_user_friendly_stripe_message,
)
from .payment import (
    AchPaymentCreate,
    AchPaymentResult,
    AchTransactionResult,
    CardPaymentResult,
    PaymentCreate,
    ScheduledCharge,
)
from .pricing import BillingPeriod, NightlyRate, PricingBreakdown, PricingConfig
from .reservation import BookingResult, ReservationCreate
from .stripe_webhook import StripeWebhookEvent, WebhookOutcome

__all__ = [
    # Enums
    "AchAccountType",
    "ChargeType",
    "PaymentProvider",
    # Pricing
    "BillingPeriod",
    "NightlyRate",
    "PricingBreakdown",
    "PricingConfig",
    # Availability
    "CheckoutQuote",
    "OffersResult",
    "RoomOffer",
    "RoomSummary",
    # Reservation
    "BookingResult",
    "ReservationCreate",
    # Payment
    "AchPaymentCreate",
    "AchPaymentResult",
    "AchTransactionResult",
    "CardPaymentResult",
    "PaymentCreate",
    "ScheduledCharge",
    # Errors
    "BookingError",
    "ErrorCode",
    "ErrorResponse",
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "STRIPE_ERROR_MESSAGES",
    "get_user_friendly_stripe_message",
    # Stripe
    "StripeWebhookEvent",
    "WebhookOutcome",
]
