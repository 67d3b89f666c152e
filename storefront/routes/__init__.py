# Storefront Routes

from .cart import router as cart_router
from .catalog import router as catalog_router
from .checkout import router as checkout_router

__all__ = ["cart_router", "catalog_router", "checkout_router"]
