"""Order notifier: renders messages for order events and logs them.

Delivery (email, SMS) is handled outside this service; the rendered
message is returned so a transport can pick it up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.notifications.constants import ADMIN_KINDS
from modules.notifications.templates import RenderedMessage, render

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class OrderNotifier:
    def notify(self, kind: str, order: Order) -> RenderedMessage:
        message = render(kind, order)
        logger.info(
            "notification.rendered",
            kind=message.kind,
            audience="admin" if message.kind in ADMIN_KINDS else "customer",
            order_id=str(order.id),
            order_number=order.order_number,
            subject=message.subject,
        )
        return message
