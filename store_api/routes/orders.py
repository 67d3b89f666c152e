"""Order API routes for the store API"""

import logging

from fastapi import APIRouter, HTTPException

from ..models.order import (
    CreateOrderItemRequest,
    CreateOrderRequest,
    Order,
    OrderItem,
    OrderWithItems,
    UpdateOrderStatusRequest,
)
from ..database.catalog import catalog_db
from ..database.orders import order_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Orders"])


@router.post("/orders", response_model=Order, status_code=201)
async def create_order(request: CreateOrderRequest):
    """Create an order header"""
    order = order_db.create_order(request)
    logger.info(f"Order {order.id} created: ${order.total:.2f} ({order.status.value})")
    return order


@router.post("/orders/{order_id}/items", response_model=OrderItem, status_code=201)
async def add_order_item(order_id: int, request: CreateOrderItemRequest):
    """Add an item to an existing order"""
    if not order_db.get_order(order_id):
        raise HTTPException(status_code=404, detail="Order not found")

    if not catalog_db.get_product(request.product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    return order_db.create_order_item(order_id, request)


@router.get("/orders/{order_id}", response_model=OrderWithItems)
async def get_order(order_id: int):
    """Get an order with its items"""
    order = order_db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderWithItems(
        **order.model_dump(),
        items=order_db.get_order_items(order_id),
    )


@router.patch("/orders/{order_id}/status", response_model=Order)
async def update_order_status(order_id: int, request: UpdateOrderStatusRequest):
    """Move an order to a new status"""
    order = order_db.update_status(order_id, request.status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    logger.info(f"Order {order_id} status -> {order.status.value}")
    return order


@router.get("/users/{user_id}/orders", response_model=list[Order])
async def list_user_orders(user_id: int):
    """List a user's orders"""
    return order_db.list_orders(user_id=user_id)
