"""
Cart engine

Owns a single Cart, applies mutations to it and keeps its totals in sync.

Every mutation updates the in-memory cart before anything is awaited, so a
reader sees the new state immediately. The persistence write that follows
is best effort: a failing storage backend is logged and never undoes the
mutation.

Mutations are serialized per cart: each one holds the cart's lock from the
change through its persistence write, so writes land in mutation order.
"""

import asyncio
import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from .models import Cart, LineItem, ProductSnapshot
from .pricing import compute_totals
from .storage import CartStorage

logger = logging.getLogger(__name__)


class CartError(Exception):
    """Base exception for cart errors"""
    pass


class InvalidQuantityError(CartError, ValueError):
    """Quantity is not an integer or is out of range"""
    pass


def _require_int(quantity) -> None:
    # bool is an int subclass but never a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(f"Quantity must be an integer, got {quantity!r}")


class CartEngine:
    """
    Session cart with add/remove/update/clear operations.

    `checkout_lock` is held by whoever is turning this cart into an order;
    at most one checkout runs per cart.
    """

    def __init__(
        self,
        storage: Optional[CartStorage] = None,
        cart: Optional[Cart] = None,
    ):
        self._storage = storage
        self._cart = cart if cart is not None else Cart()
        self._lock = asyncio.Lock()
        self.checkout_lock = asyncio.Lock()
        self._recalculate_totals()

    @classmethod
    async def load(cls, storage: CartStorage) -> "CartEngine":
        """
        Restore the cart saved in storage.

        Missing, unreadable or malformed data gives an empty cart. Stored
        totals are ignored and recomputed from the restored items.
        """
        cart = None
        try:
            raw = await storage.read()
        except Exception as e:
            logger.warning(f"Could not read saved cart, starting empty: {e}")
            raw = None

        if raw:
            try:
                cart = Cart.model_validate_json(raw)
            except ValidationError as e:
                logger.warning(f"Discarding malformed saved cart: {e.error_count()} error(s)")

        return cls(storage=storage, cart=cart)

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def item_count(self) -> int:
        """Total number of units across all line items"""
        return sum(item.quantity for item in self._cart.items)

    def get_item(self, product_id: int) -> Optional[LineItem]:
        return next(
            (item for item in self._cart.items if item.product_id == product_id),
            None,
        )

    async def add_item(self, product: ProductSnapshot, quantity: int = 1) -> Cart:
        """
        Add a product to the cart.

        If the product is already in the cart its quantity grows by
        `quantity`. The snapshot stored with the first add is kept; a newer
        snapshot passed here does not replace it.
        """
        _require_int(quantity)
        if quantity < 1:
            raise InvalidQuantityError(f"Quantity must be at least 1, got {quantity}")

        async with self._lock:
            existing_item = self.get_item(product.id)
            if existing_item:
                existing_item.quantity += quantity
            else:
                self._cart.items.append(
                    LineItem(product_id=product.id, quantity=quantity, product=product)
                )
            await self._settle()
        return self._cart

    async def remove_item(self, product_id: int) -> Cart:
        """Remove a product from the cart. Unknown ids are ignored."""
        async with self._lock:
            self._drop(product_id)
            await self._settle()
        return self._cart

    async def update_quantity(self, product_id: int, quantity: int) -> Cart:
        """Set the quantity of a line item; zero or less removes it"""
        _require_int(quantity)

        async with self._lock:
            if quantity <= 0:
                self._drop(product_id)
            else:
                item = self.get_item(product_id)
                if item:
                    item.quantity = quantity
            await self._settle()
        return self._cart

    async def clear(self) -> Cart:
        """Empty the cart"""
        async with self._lock:
            self._cart.items = []
            await self._settle()
        return self._cart

    async def remove_purchased(self, purchased: Iterable[LineItem]) -> Cart:
        """
        Take purchased quantities out of the cart.

        Only the units that were bought are removed: a line grown after the
        purchase keeps the extra units, and lines added since are untouched.
        """
        async with self._lock:
            for bought in purchased:
                item = self.get_item(bought.product_id)
                if item is None:
                    continue
                remaining = item.quantity - bought.quantity
                if remaining > 0:
                    item.quantity = remaining
                else:
                    self._drop(bought.product_id)
            await self._settle()
        return self._cart

    def _drop(self, product_id: int) -> None:
        self._cart.items = [i for i in self._cart.items if i.product_id != product_id]

    async def _settle(self) -> None:
        self._recalculate_totals()
        await self._persist()

    def _recalculate_totals(self) -> None:
        totals = compute_totals(self._cart.items)
        self._cart.subtotal = totals.subtotal
        self._cart.tax = totals.tax
        self._cart.shipping = totals.shipping
        self._cart.total = totals.total

    async def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            await self._storage.write(self._cart.model_dump_json(by_alias=True))
        except Exception as e:
            logger.warning(f"Cart persistence failed, keeping in-memory cart: {e}")
