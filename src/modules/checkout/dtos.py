"""Checkout DTOs (pydantic v2, immutable).

- ``CheckoutLine``: what the client asks for (product, variant, quantity).
- ``CheckoutItem``: a line priced against the catalog, with name
  snapshots.
- ``CheckoutSession``: a priced, read-once snapshot handed from "buy now"
  (or the cart) to order creation.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from modules.pricing.engine import line_subtotal

SessionSource = Literal["cart", "buy_now"]


class CheckoutLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(default=1, ge=1)


class CheckoutItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    variant_id: Optional[str] = None
    product_name: str
    variant_name: str = ""
    unit_price: Decimal
    quantity: int = Field(ge=1)

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return self.product_id, self.variant_id

    @property
    def line_total(self) -> Decimal:
        return line_subtotal(self.unit_price, self.quantity)

    def as_line(self) -> CheckoutLine:
        return CheckoutLine(
            product_id=self.product_id,
            variant_id=self.variant_id,
            quantity=self.quantity,
        )


class CheckoutSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    items: Tuple[CheckoutItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    created_at: datetime
    source: SessionSource = "buy_now"
    owner_id: str = ""
