"""Cart data models"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductSnapshot(CamelModel):
    """Copy of a catalog product taken when it was added to the cart"""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str = ""
    price: float = Field(ge=0)
    compare_price: Optional[float] = None
    in_stock: bool = True


class LineItem(CamelModel):
    """One product and its quantity in a cart"""

    product_id: int
    quantity: int = Field(ge=1)
    product: ProductSnapshot

    @model_validator(mode="after")
    def product_id_matches_snapshot(self) -> "LineItem":
        if self.product_id != self.product.id:
            raise ValueError(
                f"Line item product_id {self.product_id} does not match snapshot id {self.product.id}"
            )
        return self

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class Cart(CamelModel):
    """Shopping cart. Totals are derived from items and never set directly."""

    items: list[LineItem] = []
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    total: float = 0.0

    @model_validator(mode="after")
    def one_line_per_product(self) -> "Cart":
        seen = set()
        for item in self.items:
            if item.product_id in seen:
                raise ValueError(f"Duplicate line item for product {item.product_id}")
            seen.add(item.product_id)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.items
