"""Catalog API routes for the store API"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..models.catalog import Category, Product
from ..database.catalog import catalog_db

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get("/categories", response_model=list[Category])
async def list_categories():
    """List all product categories"""
    return catalog_db.get_categories()


@router.get("/categories/{slug}", response_model=Category)
async def get_category(slug: str):
    """Get a category by slug"""
    category = catalog_db.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("/products", response_model=list[Product])
async def list_products(
    category: Optional[str] = Query(None, description="Category slug"),
    search: Optional[str] = Query(None, description="Search query"),
):
    """List products, filtered by category slug or search text"""
    return catalog_db.get_products(category_slug=category, search=search)


@router.get("/products/{slug}", response_model=Product)
async def get_product(slug: str):
    """Get a product by slug"""
    product = catalog_db.get_product_by_slug(slug)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
