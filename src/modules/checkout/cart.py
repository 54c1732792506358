"""Shopping cart application state.

A ``Cart`` is a plain object owned by whoever holds it (a request, a
test, a client session); there is no process-wide cart.  Checkout never
reads the cart directly: it takes a ``snapshot()``, so a "buy now"
session and the cart never share mutable state.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional, Tuple

from modules.checkout.dtos import CheckoutItem
from modules.pricing.engine import items_subtotal

_Key = Tuple[str, Optional[str]]


class Cart:
    def __init__(self) -> None:
        self._items: Dict[_Key, CheckoutItem] = {}
        self._coupon_code: Optional[str] = None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add(self, item: CheckoutItem) -> None:
        """Add *item*, merging quantities with an existing line."""
        existing = self._items.get(item.key)
        if existing is not None:
            item = item.model_copy(update={"quantity": existing.quantity + item.quantity})
        self._items[item.key] = item

    def remove(self, product_id: str, variant_id: Optional[str] = None) -> None:
        self._items.pop((product_id, variant_id), None)

    def update_quantity(
        self, product_id: str, quantity: int, variant_id: Optional[str] = None
    ) -> None:
        """Set the quantity of a line; zero or less removes it."""
        key = (product_id, variant_id)
        if key not in self._items:
            return
        if quantity <= 0:
            del self._items[key]
        else:
            self._items[key] = self._items[key].model_copy(update={"quantity": quantity})

    def clear(self) -> None:
        self._items.clear()
        self._coupon_code = None

    # ------------------------------------------------------------------
    # Coupon
    # ------------------------------------------------------------------

    @property
    def coupon_code(self) -> Optional[str]:
        return self._coupon_code

    def apply_coupon(self, code: str) -> None:
        self._coupon_code = code.strip().upper() or None

    def remove_coupon(self) -> None:
        self._coupon_code = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def subtotal(self) -> Decimal:
        return items_subtotal((i.unit_price, i.quantity) for i in self._items.values())

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> Tuple[CheckoutItem, ...]:
        """Immutable copy of the current lines, in insertion order."""
        return tuple(item.model_copy() for item in self._items.values())
