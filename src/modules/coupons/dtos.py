"""Coupon DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.coupons.constants import MAX_PERCENTAGE, DiscountType

if TYPE_CHECKING:
    from modules.coupons.models import Coupon


class AppliedCoupon(BaseModel):
    """A coupon that passed validation for a given subtotal."""

    model_config = ConfigDict(frozen=True)

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_discount: Optional[Decimal] = None
    discount_amount: Decimal


class CouponSummaryDTO(BaseModel):
    """Public view of a coupon, used for alternative suggestions."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    discount_type: DiscountType
    discount_value: Decimal
    min_order_value: Decimal
    valid_until: datetime

    @classmethod
    def from_entity(cls, coupon: Coupon) -> CouponSummaryDTO:
        return cls(
            code=coupon.code,
            description=coupon.description,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            min_order_value=coupon.min_order_value,
            valid_until=coupon.valid_until,
        )


class CreateCouponDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    description: str = ""
    discount_type: DiscountType
    discount_value: Decimal
    min_order_value: Decimal = Decimal("0.00")
    max_discount: Optional[Decimal] = None
    valid_from: datetime
    valid_until: datetime
    usage_limit: Optional[int] = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def code_is_normalised(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Coupon code is required.")
        return v

    @field_validator("discount_value")
    @classmethod
    def discount_value_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Discount value must be greater than zero.")
        return v

    @field_validator("min_order_value")
    @classmethod
    def min_order_value_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Minimum order value cannot be negative.")
        return v

    @field_validator("usage_limit")
    @classmethod
    def usage_limit_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("Usage limit must be at least 1.")
        return v

    @model_validator(mode="after")
    def check_invariants(self):
        if self.discount_type == DiscountType.PERCENTAGE and (
            self.discount_value > MAX_PERCENTAGE
        ):
            raise ValueError("Percentage discount cannot exceed 100.")
        if self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from.")
        return self


class UpdateCouponDTO(BaseModel):
    """Partial coupon edit; only fields that were set are applied.

    Cross-field rules are checked against the merged coupon by the model's
    ``clean`` since either end of a range may come from the stored row.
    """

    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None
    min_order_value: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    usage_limit: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("usage_limit")
    @classmethod
    def usage_limit_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("Usage limit must be at least 1.")
        return v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
