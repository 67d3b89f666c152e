# Shopping cart engine
# Line items, pricing and best-effort persistence for a session cart

from .models import Cart, LineItem, ProductSnapshot
from .pricing import TAX_RATE, Totals, compute_totals, format_currency, round_money
from .engine import CartEngine, CartError, InvalidQuantityError
from .storage import CartStorage, CartStorageError, FileCartStorage, MemoryCartStorage

__all__ = [
    "Cart",
    "LineItem",
    "ProductSnapshot",
    "TAX_RATE",
    "Totals",
    "compute_totals",
    "format_currency",
    "round_money",
    "CartEngine",
    "CartError",
    "InvalidQuantityError",
    "CartStorage",
    "CartStorageError",
    "FileCartStorage",
    "MemoryCartStorage",
]
