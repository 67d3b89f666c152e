"""Order models for the store API"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from cart.models import CamelModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class CreateOrderRequest(CamelModel):
    """Request to create an order"""
    user_id: Optional[int] = None
    status: OrderStatus = OrderStatus.PENDING
    total: float = Field(ge=0)
    tax: Optional[float] = Field(default=None, ge=0)
    shipping: Optional[float] = Field(default=None, ge=0)


class CreateOrderItemRequest(CamelModel):
    """Request to add an item to an order"""
    product_id: int
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)


class UpdateOrderStatusRequest(CamelModel):
    """Request to change an order's status"""
    status: OrderStatus


class OrderItem(CamelModel):
    """Item recorded against an order, priced at purchase time"""
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: float


class Order(CamelModel):
    """Order header"""
    id: int
    user_id: Optional[int] = None
    status: OrderStatus
    total: float
    tax: Optional[float] = None
    shipping: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class OrderWithItems(Order):
    """Order with its items attached"""
    items: list[OrderItem] = []
