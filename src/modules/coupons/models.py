"""Coupon model.

Business rules implemented:
- Codes are case-insensitive: stored uppercase, looked up uppercase.
- ``discount_value`` > 0, and <= 100 for percentage coupons.
- ``valid_until`` must be after ``valid_from`` (checked in ``clean`` and
  by a database constraint).
- ``usage_count`` is only ever changed by the atomic redeem update in the
  repository, never by read-modify-write on an instance.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.coupons.constants import MAX_PERCENTAGE, DiscountType


class Coupon(BaseModel):
    code = models.CharField(max_length=40, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2)
    min_order_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    max_discount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, default=None
    )
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    usage_limit = models.PositiveIntegerField(null=True, blank=True, default=None)
    usage_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_by = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "coupons"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "valid_until"], name="coupons_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(valid_until__gt=models.F("valid_from")),
                name="coupons_valid_window",
            ),
            models.CheckConstraint(
                check=models.Q(discount_value__gt=0),
                name="coupons_discount_positive",
            ),
        ]

    @staticmethod
    def normalize_code(code: str) -> str:
        return (code or "").strip().upper()

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def is_within_window(self, now: datetime) -> bool:
        return self.valid_from <= now <= self.valid_until

    def clean(self) -> None:
        super().clean()
        self.code = self.normalize_code(self.code)
        errors = {}
        if not self.code:
            errors["code"] = "Coupon code is required."
        if self.discount_value is not None and self.discount_value <= 0:
            errors["discount_value"] = "Discount value must be greater than zero."
        elif (
            self.discount_type == DiscountType.PERCENTAGE
            and self.discount_value is not None
            and self.discount_value > MAX_PERCENTAGE
        ):
            errors["discount_value"] = "Percentage discount cannot exceed 100."
        if self.min_order_value is not None and self.min_order_value < 0:
            errors["min_order_value"] = "Minimum order value cannot be negative."
        if self.max_discount is not None and self.max_discount <= 0:
            errors["max_discount"] = "Maximum discount must be greater than zero."
        if self.valid_from and self.valid_until and self.valid_until <= self.valid_from:
            errors["valid_until"] = "valid_until must be after valid_from."
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs) -> None:
        self.code = self.normalize_code(self.code)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.code} ({self.discount_type} {self.discount_value})"
