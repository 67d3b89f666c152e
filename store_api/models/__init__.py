# Store API Models

from .catalog import Category, Product
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderWithItems,
    CreateOrderRequest,
    CreateOrderItemRequest,
    UpdateOrderStatusRequest,
)

__all__ = [
    "Category",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderWithItems",
    "CreateOrderRequest",
    "CreateOrderItemRequest",
    "UpdateOrderStatusRequest",
]
