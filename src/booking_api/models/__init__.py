"""API-specific request/response models.

Domain models (PricingBreakdown, CheckoutQuote, payment results) live in
booking_shared.models and are returned as-is where they fit.

Modules:
- common: Date parsing shared by query parameters and request bodies
- availability: Availability response model
- payments: Card and ACH payment request bodies
- webhooks: Webhook acknowledgement models
"""

__all__: list[str] = []
