"""
Cart pricing

Totals are kept at full float precision. Rounding to cents happens only
when a value is presented.
"""

from dataclasses import dataclass
from typing import Iterable

from .models import LineItem

TAX_RATE = 0.08  # 8% flat
SHIPPING_COST = 0.0  # Free shipping, no threshold


@dataclass(frozen=True)
class Totals:
    """Derived cart totals"""
    subtotal: float
    tax: float
    shipping: float
    total: float


def compute_totals(items: Iterable[LineItem]) -> Totals:
    """Compute subtotal, tax, shipping and total for a list of line items"""
    subtotal = sum((item.product.price * item.quantity for item in items), 0.0)
    tax = subtotal * TAX_RATE
    shipping = SHIPPING_COST
    return Totals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )


def round_money(value: float) -> float:
    """Round a money value to cents for display"""
    return round(value, 2)


def format_currency(value: float, symbol: str = "$") -> str:
    """Format a money value for display, e.g. 48.6 -> '$48.60'"""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
