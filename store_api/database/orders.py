"""Order storage for the store API"""

import itertools
from datetime import datetime, timezone
from typing import Optional

from ..models.order import (
    CreateOrderItemRequest,
    CreateOrderRequest,
    Order,
    OrderItem,
    OrderStatus,
)


class OrderDatabase:
    """In-memory order and order item storage"""

    def __init__(self):
        self.orders: dict[int, Order] = {}
        self.order_items: dict[int, OrderItem] = {}
        self._order_ids = itertools.count(1)
        self._order_item_ids = itertools.count(1)

    def create_order(self, request: CreateOrderRequest) -> Order:
        """Create an order header. Items are added separately."""
        now = datetime.now(timezone.utc)
        order = Order(
            id=next(self._order_ids),
            user_id=request.user_id,
            status=request.status,
            total=request.total,
            tax=request.tax,
            shipping=request.shipping,
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        return order

    def get_order(self, order_id: int) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def list_orders(self, user_id: Optional[int] = None) -> list[Order]:
        """List orders, optionally only those of one user"""
        orders = list(self.orders.values())
        if user_id is not None:
            orders = [o for o in orders if o.user_id == user_id]
        return orders

    def update_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        """Update order status"""
        order = self.get_order(order_id)
        if not order:
            return None

        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        return order

    def create_order_item(self, order_id: int, request: CreateOrderItemRequest) -> OrderItem:
        """Record an item against an existing order"""
        order_item = OrderItem(
            id=next(self._order_item_ids),
            order_id=order_id,
            product_id=request.product_id,
            quantity=request.quantity,
            price=request.price,
        )
        self.order_items[order_item.id] = order_item
        return order_item

    def get_order_items(self, order_id: int) -> list[OrderItem]:
        """Get the items of an order in creation order"""
        return [i for i in self.order_items.values() if i.order_id == order_id]


# Singleton instance
order_db = OrderDatabase()
