"""Deterministic pricing engine.

Pure functions only: no I/O, no settings access, no clock.  The same
functions back the live checkout preview and the server-side order
creation, so both must agree to the paisa for an order to be accepted.

Money is ``Decimal`` quantized to two places with ``ROUND_HALF_UP``.
Inputs that are out of range but well typed are clamped rather than
rejected: negative amounts become zero and a discount larger than the
subtotal is capped at the subtotal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Tuple, Union

from modules.pricing.constants import (
    CURRENCY_QUANTUM,
    DEFAULT_TAX_RATE,
    ROUNDING,
    ZERO,
)

Amount = Union[Decimal, int, float, str]


def to_money(value: Optional[Amount]) -> Decimal:
    """Convert *value* to a non-negative currency amount.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.10")``
    rather than its binary expansion.
    """
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    amount = value.quantize(CURRENCY_QUANTUM, rounding=ROUNDING)
    return amount if amount > ZERO else ZERO


def _to_rate(value: Amount) -> Decimal:
    rate = value if isinstance(value, Decimal) else Decimal(str(value))
    return rate if rate > 0 else Decimal("0")


@dataclass(frozen=True)
class PricingBreakdown:
    """Result of :func:`compute_totals`. Every field is currency-rounded."""

    subtotal: Decimal
    discount: Decimal
    delivery_charge: Decimal
    taxable_amount: Decimal
    tax: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "delivery_charge": self.delivery_charge,
            "taxable_amount": self.taxable_amount,
            "tax": self.tax,
            "total": self.total,
        }


def compute_totals(
    subtotal: Amount,
    discount: Amount = ZERO,
    delivery_charge: Amount = ZERO,
    tax_rate: Amount = DEFAULT_TAX_RATE,
) -> PricingBreakdown:
    """Compute discount, tax and total for an order.

    ``discount' = min(discount, subtotal)``,
    ``taxable = subtotal - discount' + delivery``,
    ``tax = taxable * tax_rate`` and ``total = taxable + tax``.
    """
    subtotal = to_money(subtotal)
    applied_discount = min(to_money(discount), subtotal)
    delivery_charge = to_money(delivery_charge)

    taxable_amount = subtotal - applied_discount + delivery_charge
    tax = to_money(taxable_amount * _to_rate(tax_rate))
    total = taxable_amount + tax

    return PricingBreakdown(
        subtotal=subtotal,
        discount=applied_discount,
        delivery_charge=delivery_charge,
        taxable_amount=taxable_amount,
        tax=tax,
        total=total,
    )


def unit_price(
    base_price: Amount,
    discount_price: Optional[Amount] = None,
    price_adjustment: Amount = ZERO,
) -> Decimal:
    """Effective unit price of a catalog item.

    A product-level ``discount_price`` only applies when it is set and
    strictly lower than ``base_price``; the variant adjustment (which may
    be negative) is added afterwards.
    """
    base = to_money(base_price)
    if discount_price is not None:
        discounted = to_money(discount_price)
        if ZERO < discounted < base:
            base = discounted
    adjustment = Decimal(str(price_adjustment)).quantize(
        CURRENCY_QUANTUM, rounding=ROUNDING
    )
    return to_money(base + adjustment)


def line_subtotal(price: Amount, quantity: int) -> Decimal:
    return to_money(to_money(price) * max(int(quantity), 0))


def items_subtotal(lines: Iterable[Tuple[Amount, int]]) -> Decimal:
    """Sum of ``unit_price * quantity`` over ``(unit_price, quantity)`` pairs."""
    return sum((line_subtotal(price, qty) for price, qty in lines), ZERO)


def preview_tax(subtotal: Amount, tax_rate: Amount = DEFAULT_TAX_RATE) -> Decimal:
    """Tax on a bare subtotal, shown before coupon and delivery are known."""
    return compute_totals(subtotal, tax_rate=tax_rate).tax


def totals_match(expected: Amount, actual: Amount) -> bool:
    """Compare two amounts after currency rounding."""
    return to_money(expected) == to_money(actual)


def coupon_discount(
    discount_type: str,
    discount_value: Amount,
    subtotal: Amount,
    max_discount: Optional[Amount] = None,
) -> Decimal:
    """Discount granted by a coupon on *subtotal*.

    ``percentage`` coupons take ``subtotal * value / 100``, capped by
    ``max_discount`` when one is configured; ``fixed`` coupons take their
    face value.  Either way the result never exceeds the subtotal.
    """
    subtotal = to_money(subtotal)
    value = Decimal(str(discount_value))
    if discount_type == "percentage":
        discount = to_money(subtotal * value / Decimal("100"))
        if max_discount is not None:
            discount = min(discount, to_money(max_discount))
    elif discount_type == "fixed":
        discount = to_money(value)
    else:
        raise ValueError(f"Unknown discount type: {discount_type!r}")
    return min(discount, subtotal)
