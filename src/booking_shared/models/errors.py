"""Standard error codes for the booking backend.

All services and routes raise BookingError with one of these codes so
the API returns a consistent error body.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Booking error codes (ERR_001-ERR_006)
    INVALID_ROOM = "ERR_001"
    DATES_UNAVAILABLE = "ERR_002"
    RATES_UNAVAILABLE = "ERR_003"
    INVALID_DATES = "ERR_004"
    AVAILABILITY_ERROR = "ERR_005"
    RATES_CHANGED = "ERR_006"

    # Stripe/Payment error codes (ERR_STRIPE_001-ERR_STRIPE_002)
    INVALID_WEBHOOK_SIGNATURE = "ERR_STRIPE_001"
    STRIPE_API_ERROR = "ERR_STRIPE_002"

    # ACH error codes
    ACH_DECLINED = "ERR_ACH_001"
    ACH_API_ERROR = "ERR_ACH_002"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_ROOM: "Invalid room",
    ErrorCode.DATES_UNAVAILABLE: "Unit not available for selected dates",
    ErrorCode.RATES_UNAVAILABLE: "Unable to retrieve rates",
    ErrorCode.INVALID_DATES: "Invalid check-in or check-out date",
    ErrorCode.AVAILABILITY_ERROR: "Failed to fetch availability",
    ErrorCode.RATES_CHANGED: "Rates for these dates have changed",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.STRIPE_API_ERROR: "Card payment could not be started",
    ErrorCode.ACH_DECLINED: "ACH payment declined",
    ErrorCode.ACH_API_ERROR: "ACH payment failed",
}

# Recovery suggestions shown alongside the message
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.INVALID_ROOM: "Choose a room from the availability list",
    ErrorCode.DATES_UNAVAILABLE: "Try different dates or another room",
    ErrorCode.RATES_UNAVAILABLE: "Try again later or contact the property",
    ErrorCode.INVALID_DATES: "Use YYYY-MM-DD dates with check-out after check-in",
    ErrorCode.AVAILABILITY_ERROR: "Try again in a few minutes",
    ErrorCode.RATES_CHANGED: "Reload checkout to see the current price",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Verify webhook secret configuration",
    ErrorCode.STRIPE_API_ERROR: "Try again or pay by bank transfer",
    ErrorCode.ACH_DECLINED: "Check the bank account details or pay by card",
    ErrorCode.ACH_API_ERROR: "Try again or pay by card",
}


class ErrorResponse(BaseModel):
    """Standard error response body returned by the API."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class BookingError(Exception):
    """Exception raised by booking operations.

    Converted to an ErrorResponse by the API exception handler.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details)


# Stripe error code to user-friendly message mapping
STRIPE_ERROR_MESSAGES: dict[str, str] = {
    # Card errors - user can fix
    "card_declined": "Your card was declined. Please try a different card.",
    "expired_card": "Your card has expired. Please use a different card.",
    "insufficient_funds": "Your card has insufficient funds. Please try a different card.",
    "incorrect_cvc": "The security code (CVC) is incorrect. Please check and try again.",
    "incorrect_number": "The card number is incorrect. Please check and try again.",
    "invalid_number": "The card number is invalid. Please check and try again.",
    "card_velocity_exceeded": "Too many card transactions. Please wait and try again later.",
    # Processing errors
    "processing_error": "A processing error occurred. Please try again.",
    "rate_limit": "Too many requests. Please wait a moment and try again.",
    # Customer errors
    "email_invalid": "The email address is invalid. Please check and try again.",
    "generic_decline": "Your card was declined. Please try a different card.",
}


def get_user_friendly_stripe_message(
    stripe_error_code: Optional[str],
    default_message: str = "Payment could not be processed. Please try again.",
) -> str:
    """Get a user-friendly message for a Stripe error code.

    Args:
        stripe_error_code: The Stripe error code (e.g., 'card_declined').
        default_message: Message to use if error code is unknown.

    Returns:
        User-friendly error message.
    """
    if stripe_error_code and stripe_error_code in STRIPE_ERROR_MESSAGES:
        return STRIPE_ERROR_MESSAGES[stripe_error_code]
    return default_message
