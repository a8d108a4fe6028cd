"""Backend services for the studio booking site."""

from .beds24 import Beds24Client, get_beds24_client
from .booking import BookingService
from .dynamodb import DynamoDBService, get_dynamodb_service
from .forte_service import ForteService, ForteServiceError, get_forte_service
from .pricing import PricingEngine, compute_breakdown
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stripe_service import StripeService, StripeServiceError, get_stripe_service
from .webhook_handler import WebhookHandler

__all__ = [
    "Beds24Client",
    "get_beds24_client",
    "BookingService",
    "DynamoDBService",
    "get_dynamodb_service",
    "ForteService",
    "ForteServiceError",
    "get_forte_service",
    "PricingEngine",
    "compute_breakdown",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "StripeService",
    "StripeServiceError",
    "get_stripe_service",
    "WebhookHandler",
]
