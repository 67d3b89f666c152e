"""Catalog browsing routes for the storefront"""

import logging
from typing import Awaitable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query

from cart import ProductSnapshot
from ..services.store_client import NotFoundError, StoreClient, StoreClientError
from .deps import get_store_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])

T = TypeVar("T")


async def _from_store(call: Awaitable[T], what: str) -> T:
    """Await a store call, translating its errors to HTTP errors"""
    try:
        return await call
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    except StoreClientError as e:
        logger.error(f"Catalog request failed: {e}")
        raise HTTPException(status_code=502, detail="Catalog is unavailable")


@router.get("/categories")
async def list_categories(store: StoreClient = Depends(get_store_client)):
    """List product categories"""
    return await _from_store(store.get_categories(), "Categories")


@router.get("/categories/{slug}")
async def get_category(slug: str, store: StoreClient = Depends(get_store_client)):
    """Get a category by slug"""
    return await _from_store(store.get_category(slug), "Category")


@router.get("/products")
async def list_products(
    category: Optional[str] = Query(None, description="Category slug"),
    search: Optional[str] = Query(None, description="Search query"),
    store: StoreClient = Depends(get_store_client),
):
    """List products"""
    return await _from_store(store.list_products(category=category, search=search), "Products")


@router.get("/products/{slug}", response_model=ProductSnapshot)
async def get_product(slug: str, store: StoreClient = Depends(get_store_client)):
    """Get the snapshot of a product as it would be added to a cart"""
    return await _from_store(store.get_product(slug), "Product")
