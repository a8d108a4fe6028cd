"""API models for payment endpoints.

Bodies use camelCase keys (roomSlug, firstName, nightlyRates); snake_case
keys are accepted too. Amounts are never part of the request: they are
recomputed from the nightly rates.
"""

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from booking_shared.models.payment import AchPaymentCreate, PaymentCreate

from .common import StayDate

_REQUEST_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class StripePaymentRequest(PaymentCreate):
    """Request to start a card payment."""

    model_config = ConfigDict(
        **_REQUEST_CONFIG,
        json_schema_extra={
            "examples": [
                {
                    "roomSlug": "room-12345",
                    "arrival": "2026-07-15",
                    "departure": "2026-07-18",
                    "guests": 2,
                    "firstName": "Jane",
                    "lastName": "Doe",
                    "email": "jane@example.com",
                    "phone": "+1 555 0100",
                    "nightlyRates": [
                        {"date": "2026-07-15", "rate": 100},
                        {"date": "2026-07-16", "rate": 100},
                        {"date": "2026-07-17", "rate": 100},
                    ],
                }
            ]
        },
    )

    arrival: StayDate
    departure: StayDate


class FortePaymentRequest(AchPaymentCreate):
    """Request to pay by bank transfer."""

    model_config = ConfigDict(**_REQUEST_CONFIG)

    arrival: StayDate
    departure: StayDate
