"""
Checkout Orchestrator

Turns a session cart into an order on the store API:

1. Create the order header with the cart's totals (status "pending")
2. Record one order item per line item, priced from the cart snapshot
3. Take the purchased units out of the cart once every call has succeeded

The two kinds of records are created by separate calls, so the sequence is
not atomic. When some items fail to record, the order is left as created
for manual reconciliation, the cart is kept, and PartialOrderError reports
which items are missing. Item calls are never retried because the store API
would record a duplicate.

Only one checkout runs per cart at a time; a second request while one is in
flight is refused with CheckoutInProgressError. The cart stays editable
during checkout, and changes made meanwhile survive it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from cart import Cart, CartEngine, LineItem
from .store_client import StoreClient, StoreClientError

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    """State of a single checkout attempt"""
    IDLE = "idle"
    SUBMITTING_ORDER = "submitting_order"
    SUBMITTING_ITEMS = "submitting_items"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS = {
    CheckoutState.IDLE: {CheckoutState.SUBMITTING_ORDER},
    CheckoutState.SUBMITTING_ORDER: {CheckoutState.SUBMITTING_ITEMS, CheckoutState.FAILED},
    CheckoutState.SUBMITTING_ITEMS: {CheckoutState.SUCCEEDED, CheckoutState.FAILED},
    CheckoutState.SUCCEEDED: set(),
    CheckoutState.FAILED: set(),
}


@dataclass
class ItemOutcome:
    """Result of recording one line item against the order"""
    product_id: int
    quantity: int
    price: float
    order_item: Optional[dict] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.order_item is not None


@dataclass
class CheckoutAttempt:
    """One run of the checkout sequence"""
    user_id: Optional[int] = None
    shipping_address: Optional[dict] = None
    state: CheckoutState = CheckoutState.IDLE
    order: Optional[dict] = None
    outcomes: list[ItemOutcome] = field(default_factory=list)
    error: Optional[str] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def order_id(self) -> Optional[int]:
        return self.order["id"] if self.order else None

    @property
    def recorded_items(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed_items(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def transition(self, new_state: CheckoutState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid checkout transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        if new_state in (CheckoutState.SUCCEEDED, CheckoutState.FAILED):
            self.finished_at = datetime.now(timezone.utc)

    def fail(self, error: str) -> None:
        self.error = error
        self.transition(CheckoutState.FAILED)


class CheckoutError(Exception):
    """Base exception for checkout failures"""

    def __init__(self, message: str, attempt: Optional[CheckoutAttempt] = None):
        super().__init__(message)
        self.attempt = attempt


class EmptyCartError(CheckoutError):
    """Checkout was requested for an empty cart"""
    pass


class OrderCreationError(CheckoutError):
    """The order header could not be created; nothing was recorded"""
    pass


class CheckoutInProgressError(CheckoutError):
    """Another checkout of the same cart has not finished yet"""
    pass


class PartialOrderError(CheckoutError):
    """The order exists but some of its items could not be recorded"""

    @property
    def order_id(self) -> Optional[int]:
        return self.attempt.order_id if self.attempt else None

    @property
    def failed_items(self) -> list[ItemOutcome]:
        return self.attempt.failed_items if self.attempt else []


@dataclass
class CheckoutResult:
    """Successful checkout"""
    order_id: int
    order: dict
    items: list[dict]
    attempt: CheckoutAttempt


class CheckoutOrchestrator:
    """
    Runs checkout for a session cart.

    Line items are submitted one after another in cart order unless
    concurrent_item_submission is set, in which case they are sent together
    and awaited as a group. Either way purchased items leave the cart only
    after every one of them has been recorded.
    """

    def __init__(self, store_client: StoreClient, concurrent_item_submission: bool = False):
        self.store = store_client
        self.concurrent_item_submission = concurrent_item_submission

    async def checkout(
        self,
        engine: CartEngine,
        user_id: Optional[int] = None,
        shipping_address: Optional[dict] = None,
    ) -> CheckoutResult:
        """
        Create an order for the cart and take the purchased items out of it.

        Raises:
            CheckoutInProgressError: another checkout of this cart is running
            EmptyCartError: cart has no items; no request is made
            OrderCreationError: order header failed; cart is untouched
            PartialOrderError: some items failed; cart is untouched
        """
        attempt = CheckoutAttempt(user_id=user_id, shipping_address=shipping_address)

        if engine.checkout_lock.locked():
            raise CheckoutInProgressError("Your order is already being placed", attempt)

        async with engine.checkout_lock:
            return await self._run(engine, attempt)

    async def _run(self, engine: CartEngine, attempt: CheckoutAttempt) -> CheckoutResult:
        if engine.cart.is_empty:
            raise EmptyCartError("Your cart is empty", attempt)

        # Freeze what is being bought so the payloads agree with each other
        cart = engine.cart.model_copy(deep=True)

        attempt.transition(CheckoutState.SUBMITTING_ORDER)
        order = await self._create_order(cart, attempt)

        attempt.transition(CheckoutState.SUBMITTING_ITEMS)
        attempt.outcomes = await self._submit_items(order["id"], cart.items)

        if attempt.failed_items:
            failed_ids = [o.product_id for o in attempt.failed_items]
            attempt.fail(
                f"{len(failed_ids)} of {len(attempt.outcomes)} items could not be added to order {order['id']}"
            )
            logger.error(
                f"Order {order['id']} is incomplete and needs reconciliation: "
                f"recorded={[o.product_id for o in attempt.recorded_items]} failed={failed_ids}"
            )
            raise PartialOrderError(attempt.error, attempt)

        await engine.remove_purchased(cart.items)
        attempt.transition(CheckoutState.SUCCEEDED)

        logger.info(
            f"Order {order['id']} placed: {len(cart.items)} item(s), total ${cart.total:.2f}"
            + (f", user {attempt.user_id}" if attempt.user_id is not None else "")
        )

        return CheckoutResult(
            order_id=order["id"],
            order=order,
            items=[o.order_item for o in attempt.outcomes],
            attempt=attempt,
        )

    async def _create_order(self, cart: Cart, attempt: CheckoutAttempt) -> dict:
        try:
            order = await self.store.create_order(
                total=cart.total,
                tax=cart.tax,
                shipping=cart.shipping,
                status="pending",
                user_id=attempt.user_id,
            )
        except StoreClientError as e:
            attempt.fail(f"Order could not be created: {e}")
            logger.error(attempt.error)
            raise OrderCreationError("There was a problem placing your order. Please try again.", attempt) from e

        if not isinstance(order, dict) or "id" not in order:
            attempt.fail(f"Order service returned no order id: {order!r}")
            logger.error(attempt.error)
            raise OrderCreationError("There was a problem placing your order. Please try again.", attempt)

        attempt.order = order
        return order

    async def _submit_items(self, order_id: int, items: list[LineItem]) -> list[ItemOutcome]:
        if self.concurrent_item_submission:
            return list(await asyncio.gather(*(self._submit_item(order_id, item) for item in items)))

        outcomes = []
        for item in items:
            outcomes.append(await self._submit_item(order_id, item))
        return outcomes

    async def _submit_item(self, order_id: int, item: LineItem) -> ItemOutcome:
        outcome = ItemOutcome(
            product_id=item.product_id,
            quantity=item.quantity,
            price=item.product.price,
        )
        try:
            outcome.order_item = await self.store.add_order_item(
                order_id=order_id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.product.price,
            )
        except StoreClientError as e:
            outcome.error = str(e)
            logger.warning(f"Order {order_id}: item {item.product_id} not recorded: {e}")
        return outcome
