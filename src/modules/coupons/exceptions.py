"""Coupon domain exceptions.

``CouponError`` subclasses carry a stable ``code`` discriminator plus the
data the storefront needs to render an actionable message (the validity
date, the shortfall amount).  The API layer serialises ``as_dict()``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict


class CouponError(Exception):
    """Base class for coupon validation failures."""

    code = "coupon_error"

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "detail": str(self)}


class CouponNotFound(CouponError):
    """No active coupon exists for the code."""

    code = "not_found"

    def __init__(self, coupon_code: str) -> None:
        self.coupon_code = coupon_code
        super().__init__(f"Coupon {coupon_code!r} is invalid.")


class CouponNotYetValid(CouponError):
    code = "not_yet_valid"

    def __init__(self, valid_from: datetime) -> None:
        self.valid_from = valid_from
        super().__init__(f"This coupon is valid from {valid_from:%d %b %Y}.")

    def as_dict(self) -> Dict[str, Any]:
        return {**super().as_dict(), "valid_from": self.valid_from.isoformat()}


class CouponExpired(CouponError):
    code = "expired"

    def __init__(self, valid_until: datetime) -> None:
        self.valid_until = valid_until
        super().__init__(f"This coupon expired on {valid_until:%d %b %Y}.")

    def as_dict(self) -> Dict[str, Any]:
        return {**super().as_dict(), "valid_until": self.valid_until.isoformat()}


class CouponBelowMinimum(CouponError):
    code = "below_minimum"

    def __init__(self, min_order_value: Decimal, shortfall: Decimal) -> None:
        self.min_order_value = min_order_value
        self.shortfall = shortfall
        super().__init__(
            f"Add ₹{shortfall} more to use this coupon "
            f"(minimum order ₹{min_order_value})."
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            **super().as_dict(),
            "min_order_value": str(self.min_order_value),
            "shortfall": str(self.shortfall),
        }


class CouponUsageExhausted(CouponError):
    code = "usage_exhausted"

    def __init__(self, coupon_code: str) -> None:
        self.coupon_code = coupon_code
        super().__init__("This coupon has reached its usage limit.")


class CouponAlreadyExists(Exception):
    """A coupon with the same (case-insensitive) code already exists."""


class InvalidCouponDefinition(Exception):
    """Admin input violates a coupon invariant."""

    def __init__(self, errors: Dict[str, Any]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
