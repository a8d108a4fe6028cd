"""API routes package.

Routers are organized by domain:

- health: Health check endpoints
- availability: Room availability and nightly rates
- checkout: Price quote for one room and date range
- payments: Card (Stripe) and ACH (Forte) payments
- webhooks: Stripe webhook receiver

All routers are registered in main.py with /api prefix.
"""

from booking_api.routes.availability import router as availability_router
from booking_api.routes.checkout import router as checkout_router
from booking_api.routes.health import router as health_router
from booking_api.routes.payments import router as payments_router
from booking_api.routes.webhooks import router as webhooks_router

__all__ = [
    "availability_router",
    "checkout_router",
    "health_router",
    "payments_router",
    "webhooks_router",
]
