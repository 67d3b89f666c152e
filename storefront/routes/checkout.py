"""Checkout and order tracking routes for the storefront"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from cart.models import CamelModel
from ..core.session import SessionManager
from ..services.checkout import (
    CheckoutInProgressError,
    CheckoutOrchestrator,
    EmptyCartError,
    OrderCreationError,
    PartialOrderError,
)
from ..services.store_client import NotFoundError, StoreClient, StoreClientError
from .deps import get_orchestrator, get_session_manager, get_store_client, require_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


class ShippingAddress(CamelModel):
    """Shipping address for order"""
    name: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str = "US"


class CheckoutRequest(CamelModel):
    """Request to checkout a session cart"""
    user_id: Optional[int] = None
    shipping_address: Optional[ShippingAddress] = None


class CheckoutResponse(CamelModel):
    """Response from checkout"""
    order_id: int
    order: dict
    items: list[dict]
    message: str


class IncompleteOrderView(CamelModel):
    """Order whose items were only partly recorded, awaiting reconciliation"""
    order_id: int
    failed_product_ids: list[int]
    recorded_product_ids: list[int]
    created_at: datetime


@router.post("/{session_id}", response_model=CheckoutResponse, status_code=201)
async def checkout(
    session_id: str,
    request: CheckoutRequest,
    manager: SessionManager = Depends(get_session_manager),
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Place an order for the session cart.

    Purchased items leave the cart only when the order and all of its items
    were recorded. On any failure the cart is left as it was. Once a session
    has placed an order for a user, later orders stay with that user.
    """
    session = await require_session(session_id, manager)
    user_id = session.user_id if session.user_id is not None else request.user_id

    try:
        result = await orchestrator.checkout(
            session.cart,
            user_id=user_id,
            shipping_address=request.shipping_address.model_dump() if request.shipping_address else None,
        )
    except CheckoutInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderCreationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except PartialOrderError as e:
        session.record_incomplete_order(
            e.order_id,
            failed_product_ids=[item.product_id for item in e.failed_items],
            recorded_product_ids=[item.product_id for item in e.attempt.recorded_items],
        )
        raise HTTPException(
            status_code=502,
            detail={
                "message": "Your order could not be completed. Our team has been notified.",
                "orderId": e.order_id,
                "failedItems": [
                    {"productId": item.product_id, "error": item.error}
                    for item in e.failed_items
                ],
            },
        )

    session.user_id = user_id
    session.record_order(result.order_id)

    return CheckoutResponse(
        order_id=result.order_id,
        order=result.order,
        items=result.items,
        message=f"Order #{result.order_id} has been created.",
    )


@router.get("/{session_id}/incomplete", response_model=list[IncompleteOrderView])
async def list_incomplete_orders(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """List this session's orders that still need reconciliation"""
    session = await require_session(session_id, manager)
    return [
        IncompleteOrderView(
            order_id=incomplete.order_id,
            failed_product_ids=incomplete.failed_product_ids,
            recorded_product_ids=incomplete.recorded_product_ids,
            created_at=incomplete.created_at,
        )
        for incomplete in session.incomplete_orders
    ]


@router.get("/orders/{order_id}")
async def get_order(
    order_id: int,
    store: StoreClient = Depends(get_store_client),
):
    """Get order details for tracking"""
    try:
        return await store.get_order(order_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except StoreClientError as e:
        logger.error(f"Order lookup failed for {order_id}: {e}")
        raise HTTPException(status_code=502, detail="Order service is unavailable")


@router.get("/users/{user_id}/orders")
async def list_user_orders(
    user_id: int,
    store: StoreClient = Depends(get_store_client),
):
    """List a user's orders"""
    try:
        return await store.get_user_orders(user_id)
    except StoreClientError as e:
        logger.error(f"Order history lookup failed for user {user_id}: {e}")
        raise HTTPException(status_code=502, detail="Order service is unavailable")
