"""In-memory catalog for the store API"""

from typing import Optional

from ..models.catalog import Category, Product

CATEGORIES: list[Category] = [
    Category(
        id=1,
        name="Electronics",
        slug="electronics",
        description="Latest gadgets and electronic devices",
        image_url="https://images.unsplash.com/photo-1505740420928-5e560c06d30e",
    ),
    Category(
        id=2,
        name="Fashion",
        slug="fashion",
        description="Trendy clothing and accessories",
        image_url="https://images.unsplash.com/photo-1567401893414-76b7b1e5a7a5",
    ),
    Category(
        id=3,
        name="Home Decor",
        slug="home-decor",
        description="Stylish furniture and home accessories",
        image_url="https://images.unsplash.com/photo-1540574163026-643ea20ade25",
    ),
    Category(
        id=4,
        name="Sports",
        slug="sports",
        description="Sports equipment and activewear",
        image_url="https://images.unsplash.com/photo-1556760544-74068565f05c",
    ),
]

PRODUCTS: list[Product] = [
    Product(
        id=1,
        name="Wireless Noise-Cancelling Headphones",
        slug="wireless-noise-cancelling-headphones",
        description="High-quality wireless headphones with noise-cancelling technology.",
        price=149.99,
        image_url="https://images.unsplash.com/photo-1546868871-7041f2a55e12",
        category_id=1,
        is_new=True,
        rating=5,
        review_count=121,
    ),
    Product(
        id=2,
        name="Premium Smart Watch",
        slug="premium-smart-watch",
        description="Track your fitness, receive notifications, and more.",
        price=299.99,
        image_url="https://images.unsplash.com/photo-1523275335684-37898b6baf30",
        category_id=1,
        rating=5,
        review_count=94,
    ),
    Product(
        id=3,
        name="Fitness Tracker Band",
        slug="fitness-tracker-band",
        description="Monitor your activity, sleep, and more.",
        price=89.99,
        compare_price=129.99,
        image_url="https://images.unsplash.com/photo-1583394838336-acd977736f90",
        category_id=1,
        is_sale=True,
        rating=4,
        review_count=76,
    ),
    Product(
        id=4,
        name="Portable Bluetooth Speaker",
        slug="portable-bluetooth-speaker",
        description="Compact yet powerful Bluetooth speaker.",
        price=79.99,
        image_url="https://images.unsplash.com/photo-1560343090-f0409e92791a",
        category_id=1,
        rating=4,
        review_count=43,
    ),
    Product(
        id=5,
        name="Professional Camera",
        slug="professional-camera",
        description="Capture stunning photos and videos.",
        price=999.99,
        image_url="https://images.unsplash.com/photo-1516035069371-29a1b244cc32",
        category_id=1,
        rating=5,
        review_count=28,
    ),
    Product(
        id=6,
        name="Laptop Backpack",
        slug="laptop-backpack",
        description="Padded compartment for laptops up to 15 inches.",
        price=59.99,
        image_url="https://images.unsplash.com/photo-1491637639811-60e2756cc1c7",
        category_id=2,
        rating=4,
        review_count=53,
    ),
    Product(
        id=7,
        name="Designer Sunglasses",
        slug="designer-sunglasses",
        description="Protect your eyes in style.",
        price=129.99,
        image_url="https://images.unsplash.com/photo-1511499767150-a48a237f0083",
        category_id=2,
        rating=4,
        review_count=37,
    ),
    Product(
        id=8,
        name="Ceramic Plant Pot",
        slug="ceramic-plant-pot",
        description="Beautifully crafted ceramic pot for your indoor plants.",
        price=24.99,
        image_url="https://images.unsplash.com/photo-1485955900006-10f4d324d411",
        category_id=3,
        is_new=True,
        rating=5,
        review_count=19,
    ),
]


class CatalogDatabase:
    """In-memory catalog of categories and products"""

    def __init__(self):
        self.categories: dict[int, Category] = {c.id: c for c in CATEGORIES}
        self.products: dict[int, Product] = {p.id: p for p in PRODUCTS}

    def get_categories(self) -> list[Category]:
        return list(self.categories.values())

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self.categories.values() if c.slug == slug), None)

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.products.get(product_id)

    def get_product_by_slug(self, slug: str) -> Optional[Product]:
        return next((p for p in self.products.values() if p.slug == slug), None)

    def get_products(
        self,
        category_slug: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Product]:
        """
        List products, optionally filtered.

        An unknown category slug yields an empty list.
        """
        results = list(self.products.values())

        if category_slug:
            category = self.get_category_by_slug(category_slug)
            if not category:
                return []
            results = [p for p in results if p.category_id == category.id]

        if search:
            query_lower = search.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower()
                or (p.description and query_lower in p.description.lower())
            ]

        return results

    def update_price(self, product_id: int, price: float) -> Optional[Product]:
        """Reprice a product. Carts keep the price they captured."""
        product = self.products.get(product_id)
        if not product:
            return None
        updated = product.model_copy(update={"price": price})
        self.products[product_id] = updated
        return updated


# Singleton instance
catalog_db = CatalogDatabase()
