# app/services/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")


def to_money(value: float | int | Decimal) -> Decimal:
    """Convert to a Decimal rounded to cents (half-up)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def compute_totals(
    lines: Iterable[tuple[float, int]],
    tax_rate: float,
    shipping_fee: float,
) -> OrderTotals:
    """
    Server-side totals from (unit_price, quantity) pairs.

    Unit prices are rounded to cents first, the same way cart and order
    lines are shown, so the subtotal always equals the sum of line totals.

    subtotal = sum(price * qty), tax = subtotal * rate, and
    total = subtotal + tax + shipping, each rounded to cents.
    """
    subtotal = sum(
        (to_money(price) * quantity for price, quantity in lines),
        Decimal("0"),
    )
    subtotal = subtotal.quantize(CENT, rounding=ROUND_HALF_UP)
    tax = to_money(subtotal * Decimal(str(tax_rate)))
    shipping = to_money(shipping_fee)
    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )
