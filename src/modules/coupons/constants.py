"""Coupon domain constants."""

from decimal import Decimal

from django.db import models


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


MAX_PERCENTAGE = Decimal("100")
DEFAULT_SUGGESTION_LIMIT = 3
