"""Catalog models for the store API"""

from typing import Optional

from pydantic import Field

from cart.models import CamelModel


class Category(CamelModel):
    """Product category"""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None


class Product(CamelModel):
    """Product in the catalog"""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: float = Field(ge=0)
    compare_price: Optional[float] = None
    image_url: str
    category_id: int
    in_stock: bool = True
    is_new: bool = False
    is_sale: bool = False
    rating: float = 0
    review_count: int = 0
