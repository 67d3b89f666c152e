"""Cart API routes for the storefront"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from cart import Cart, InvalidQuantityError, format_currency, round_money
from cart.models import CamelModel
from ..core.session import SessionManager, UserSession
from ..services.store_client import NotFoundError, StoreClient, StoreClientError
from .deps import get_session_manager, get_store_client, require_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


class AddToCartRequest(CamelModel):
    """Request to add a product to the cart"""
    slug: str
    quantity: int = 1


class UpdateCartItemRequest(CamelModel):
    """Request to set a line item's quantity; zero or less removes it"""
    quantity: int


class DisplayTotals(CamelModel):
    """Cart totals rounded to cents for presentation"""
    subtotal: float
    tax: float
    shipping: float
    total: float
    formatted_total: str


class CartResponse(CamelModel):
    """Cart API response"""
    session_id: str
    cart: Cart
    item_count: int
    display: DisplayTotals
    message: Optional[str] = None


def build_cart_response(session: UserSession, message: Optional[str] = None) -> CartResponse:
    cart = session.cart.cart
    return CartResponse(
        session_id=session.session_id,
        cart=cart,
        item_count=session.cart.item_count,
        display=DisplayTotals(
            subtotal=round_money(cart.subtotal),
            tax=round_money(cart.tax),
            shipping=round_money(cart.shipping),
            total=round_money(cart.total),
            formatted_total=format_currency(cart.total),
        ),
        message=message,
    )


@router.post("", response_model=CartResponse, status_code=201)
async def create_cart(manager: SessionManager = Depends(get_session_manager)):
    """Start a session with an empty cart"""
    session = await manager.create_session()
    return build_cart_response(session, message="Cart created")


@router.get("/{session_id}", response_model=CartResponse)
async def get_cart(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Get the cart of a session"""
    session = await require_session(session_id, manager)
    return build_cart_response(session)


@router.post("/{session_id}/items", response_model=CartResponse)
async def add_to_cart(
    session_id: str,
    request: AddToCartRequest,
    manager: SessionManager = Depends(get_session_manager),
    store: StoreClient = Depends(get_store_client),
):
    """Add a product, looked up by slug, to the cart"""
    session = await require_session(session_id, manager)

    try:
        product = await store.get_product(request.slug)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except StoreClientError as e:
        logger.error(f"Catalog lookup failed for {request.slug}: {e}")
        raise HTTPException(status_code=502, detail="Catalog is unavailable, please try again")

    if not product.in_stock:
        raise HTTPException(status_code=409, detail=f"{product.name} is out of stock")

    try:
        await session.cart.add_item(product, request.quantity)
    except InvalidQuantityError as e:
        raise HTTPException(status_code=422, detail=str(e))

    session.touch()
    return build_cart_response(
        session,
        message=f"{product.name} has been added to your cart.",
    )


@router.put("/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    session_id: str,
    product_id: int,
    request: UpdateCartItemRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Update item quantity in cart"""
    session = await require_session(session_id, manager)

    try:
        await session.cart.update_quantity(product_id, request.quantity)
    except InvalidQuantityError as e:
        raise HTTPException(status_code=422, detail=str(e))

    session.touch()
    return build_cart_response(session, message="Cart updated")


@router.delete("/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    session_id: str,
    product_id: int,
    manager: SessionManager = Depends(get_session_manager),
):
    """Remove an item from the cart"""
    session = await require_session(session_id, manager)

    item = session.cart.get_item(product_id)
    await session.cart.remove_item(product_id)

    session.touch()
    message = f"{item.product.name} has been removed from your cart." if item else None
    return build_cart_response(session, message=message)


@router.delete("/{session_id}", response_model=CartResponse)
async def clear_cart(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Clear all items from cart"""
    session = await require_session(session_id, manager)
    await session.cart.clear()
    session.touch()
    return build_cart_response(session, message="Cart cleared")
