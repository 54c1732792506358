"""Delivery settings model.

One logical row: the most recently updated record is the configuration in
force.  Charges are flat per zone; free shipping applies above a subtotal
threshold when enabled.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.delivery.constants import DeliveryZone


def _money_field(**kwargs) -> models.DecimalField:
    return models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        **kwargs,
    )


class DeliverySettings(BaseModel):
    business_pincode = models.CharField(max_length=6)
    business_city = models.CharField(max_length=100)
    business_state = models.CharField(max_length=100)
    business_latitude = models.FloatField(null=True, blank=True, default=None)
    business_longitude = models.FloatField(null=True, blank=True, default=None)

    local_delivery_charge = _money_field()
    city_delivery_charge = _money_field()
    state_delivery_charge = _money_field()
    national_delivery_charge = _money_field()

    free_shipping_threshold = _money_field()
    free_shipping_enabled = models.BooleanField(default=False)
    updated_by = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "delivery_settings"
        ordering = ["-updated_at"]
        verbose_name_plural = "delivery settings"

    def charge_for(self, zone: str) -> Decimal:
        return {
            DeliveryZone.LOCAL: self.local_delivery_charge,
            DeliveryZone.CITY: self.city_delivery_charge,
            DeliveryZone.STATE: self.state_delivery_charge,
            DeliveryZone.NATIONAL: self.national_delivery_charge,
        }[DeliveryZone(zone)]

    def __str__(self) -> str:
        return f"Delivery from {self.business_city} ({self.business_pincode})"
