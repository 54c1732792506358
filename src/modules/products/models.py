"""Catalog read model used by checkout pricing.

Only the fields pricing needs live here: the jewelry catalog itself
(categories, media, showcase attributes) is managed elsewhere.

- ``sku`` is normalised to uppercase on save.
- ``discount_price`` only applies when it is lower than ``base_price``.
- ``ProductVariant.price_adjustment`` may be negative (e.g. a lighter
  chain) but the effective unit price never drops below zero.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.pricing.engine import unit_price

logger = structlog.get_logger(__name__)


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(BaseModel):
    """Sellable catalog item (ring, necklace, earrings...)."""

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    discount_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        default=None,
    )
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(base_price__gt=0),
                name="products_base_price_positive",
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    def effective_price(self, variant: ProductVariant | None = None) -> Decimal:
        """Unit price charged at checkout for this product (and variant)."""
        adjustment = variant.price_adjustment if variant else Decimal("0")
        return unit_price(self.base_price, self.discount_price, adjustment)

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.base_price is not None and self.base_price <= 0:
            raise ValidationError({"base_price": "Price must be greater than zero."})
        if self.discount_price is not None and self.discount_price < 0:
            raise ValidationError(
                {"discount_price": "Discount price cannot be negative."}
            )

    def save(self, *args, **kwargs) -> None:
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"


class ProductVariant(BaseModel):
    """Size / metal / stone option of a product with a price delta."""

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="variants",
    )
    name = models.CharField(max_length=120)
    price_adjustment = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "product_variants"
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.product.name} / {self.name}"
