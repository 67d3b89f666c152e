# Storefront services

from .store_client import StoreClient, StoreClientError, NotFoundError
from .checkout import (
    CheckoutAttempt,
    CheckoutError,
    CheckoutInProgressError,
    CheckoutOrchestrator,
    CheckoutResult,
    CheckoutState,
    EmptyCartError,
    ItemOutcome,
    OrderCreationError,
    PartialOrderError,
)

__all__ = [
    "StoreClient",
    "StoreClientError",
    "NotFoundError",
    "CheckoutAttempt",
    "CheckoutError",
    "CheckoutInProgressError",
    "CheckoutOrchestrator",
    "CheckoutResult",
    "CheckoutState",
    "EmptyCartError",
    "ItemOutcome",
    "OrderCreationError",
    "PartialOrderError",
]
