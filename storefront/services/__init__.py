from storefront.services.availability import AvailabilityCheck, AvailabilityResolver
from storefront.services.checkout import CheckoutService
from storefront.services.idempotency import IdempotencyKeyService

__all__ = [
    "AvailabilityResolver",
    "AvailabilityCheck",
    "IdempotencyKeyService",
    "CheckoutService",
]
