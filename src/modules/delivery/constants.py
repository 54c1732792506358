"""Delivery domain constants."""

import re

from django.db import models


class DeliveryZone(models.TextChoices):
    LOCAL = "local", "Local"
    CITY = "city", "Within city"
    STATE = "state", "Within state"
    NATIONAL = "national", "National"


# Indian postal index numbers are six digits and never start with 0.
PINCODE_PATTERN = re.compile(r"^[1-9]\d{5}$")

# Working days from order to doorstep, per zone.
DELIVERY_DAYS = {
    DeliveryZone.LOCAL: 1,
    DeliveryZone.CITY: 2,
    DeliveryZone.STATE: 3,
    DeliveryZone.NATIONAL: 5,
}
FREE_SHIPPING_DELIVERY_DAYS = 2

EARTH_RADIUS_KM = 6371.0
DEFAULT_LOCAL_RADIUS_KM = 10.0

SETTINGS_CACHE_KEY = "delivery:settings:current"
