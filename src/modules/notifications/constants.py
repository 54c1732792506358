"""Notification kinds."""

from django.db import models


class NotificationKind(models.TextChoices):
    ORDER_CONFIRMATION = "order_confirmation", "Order confirmation"
    STATUS_UPDATE = "status_update", "Status update"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLATION = "cancellation", "Cancellation"
    ADMIN_NEW_ORDER = "admin_new_order", "Admin new-order alert"


# Sent to the store team rather than the customer.
ADMIN_KINDS = frozenset({NotificationKind.ADMIN_NEW_ORDER})

STORE_NAME = "Aurum Jewels"
