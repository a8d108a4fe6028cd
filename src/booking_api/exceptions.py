"""FastAPI exception handlers for converting BookingError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Invalid input or unavailable dates
- 402 Payment Required: Declined payments
- 409 Conflict: Submitted rates no longer match the current quote
- 502 Bad Gateway: Upstream (Beds24, Stripe, Forte) failures

Usage:
    from booking_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_402_PAYMENT_REQUIRED,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from booking_shared.models.errors import BookingError, ErrorCode
from booking_shared.utils.logging import get_logger

logger = get_logger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Client input and availability -> 400 Bad Request
    ErrorCode.INVALID_ROOM: HTTP_400_BAD_REQUEST,
    ErrorCode.DATES_UNAVAILABLE: HTTP_400_BAD_REQUEST,
    ErrorCode.RATES_UNAVAILABLE: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_DATES: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    # Declines -> 402 Payment Required
    ErrorCode.ACH_DECLINED: HTTP_402_PAYMENT_REQUIRED,
    # Stale quote -> 409 Conflict
    ErrorCode.RATES_CHANGED: HTTP_409_CONFLICT,
    # Upstream failures -> 502 Bad Gateway
    ErrorCode.AVAILABILITY_ERROR: HTTP_502_BAD_GATEWAY,
    ErrorCode.STRIPE_API_ERROR: HTTP_502_BAD_GATEWAY,
    ErrorCode.ACH_API_ERROR: HTTP_502_BAD_GATEWAY,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode (400 if not mapped)."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Convert a BookingError to its JSON error body and HTTP status.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The BookingError exception

    Returns:
        JSONResponse with error details and appropriate status code.
    """
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content=exc.to_error_response().model_dump(mode="json"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer uncaught exceptions with a generic error body.

    The actual error is logged; internal details are never returned.
    """
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error_code": "ERR_INTERNAL",
            "message": "An unexpected error occurred",
            "recovery": "Please try again later or contact the property",
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
