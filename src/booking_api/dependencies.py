"""FastAPI dependency injection providers for shared services.

Services are lazily instantiated and cached with @lru_cache so warm
Lambda invocations reuse clients and loaded secrets.

Usage in routes:
    from booking_api.dependencies import get_booking_service

    @router.get("/checkout")
    async def checkout(
        service: BookingService = Depends(get_booking_service),
    ):
        ...

Service Dependency Graph:
    SSMService (singleton via get_ssm_service)
        ├── Beds24Client ──┬── BookingService
        ├── StripeService ─┤       └── PricingEngine
        ├── ForteService ──┘
        └── (Beds24Client, StripeService, DynamoDBService) ── WebhookHandler

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from booking_shared.models.pricing import PricingConfig
from booking_shared.services.beds24 import Beds24Client, get_beds24_client
from booking_shared.services.booking import BookingService
from booking_shared.services.dynamodb import get_dynamodb_service, reset_dynamodb_service
from booking_shared.services.forte_service import get_forte_service
from booking_shared.services.pricing import PricingEngine
from booking_shared.services.ssm_service import SSMService, get_ssm_service
from booking_shared.services.stripe_service import StripeService, get_stripe_service
from booking_shared.services.webhook_handler import WebhookHandler

__all__ = [
    "Beds24Client",
    "StripeService",
    "get_beds24",
    "get_booking_service",
    "get_pricing_engine",
    "get_stripe",
    "get_webhook_handler",
    "reset_services",
]


@lru_cache
def get_pricing_engine() -> PricingEngine:
    """Get cached PricingEngine configured from the environment."""
    return PricingEngine(PricingConfig.from_env())


def get_beds24() -> Beds24Client:
    """Get the shared Beds24 client."""
    return get_beds24_client()


def get_stripe() -> StripeService:
    """Get the shared Stripe service."""
    return get_stripe_service()


@lru_cache
def get_booking_service() -> BookingService:
    """Get cached BookingService instance.

    Returns:
        BookingService wired to Beds24, Stripe, Forte and the pricing engine.
    """
    return BookingService(
        beds24=get_beds24_client(),
        pricing=get_pricing_engine(),
        stripe=get_stripe_service(),
        forte=get_forte_service(),
    )


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    """Get cached WebhookHandler instance."""
    return WebhookHandler(
        stripe=get_stripe_service(),
        beds24=get_beds24_client(),
        db=get_dynamodb_service(),
    )


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the underlying client singletons.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    get_pricing_engine.cache_clear()
    get_booking_service.cache_clear()
    get_webhook_handler.cache_clear()

    get_beds24_client.cache_clear()
    get_stripe_service.cache_clear()
    get_forte_service.cache_clear()
    get_ssm_service.cache_clear()
    SSMService._cache.clear()
    reset_dynamodb_service()
