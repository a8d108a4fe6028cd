"""Shared API request/response helpers.

Stay dates are accepted as YYYY-MM-DD or the compact YYYYMMDD form used
by booking widgets.
"""

import datetime as dt
import re
from typing import Annotated, Any

from pydantic import BeforeValidator

from booking_shared.models.errors import BookingError, ErrorCode

_COMPACT_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


def normalize_date(value: Any) -> Any:
    """Rewrite a YYYYMMDD string as YYYY-MM-DD; other values pass through."""
    if isinstance(value, str):
        text = value.strip()
        match = _COMPACT_DATE_RE.match(text)
        if match:
            return "-".join(match.groups())
        return text
    return value


def parse_stay_date(value: str, field: str) -> dt.date:
    """Parse a query-string stay date.

    Args:
        value: Date in YYYY-MM-DD or YYYYMMDD form
        field: Parameter name, reported back on failure

    Raises:
        BookingError: INVALID_DATES if the value is not a calendar date
    """
    try:
        return dt.date.fromisoformat(normalize_date(value))
    except ValueError as e:
        raise BookingError(
            ErrorCode.INVALID_DATES,
            details={field: value},
        ) from e


StayDate = Annotated[dt.date, BeforeValidator(normalize_date)]
