"""Event handlers for Orders domain events.

Handlers run when the outbox relay publishes an event on the in-process
bus.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
    RefundRequested,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            total=event.total,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
            version=event.version,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            reason=event.reason,
        )


class RefundRequestedHandler(IEventHandler[RefundRequested]):
    """Logs the refund request.

    No gateway call is made; the refund itself is issued by the store team
    from the gateway dashboard using the logged ``payment_id``.
    """

    def handle(self, event: RefundRequested) -> None:
        logger.info(
            "order.event.refund_requested",
            order_id=str(event.aggregate_id),
            payment_id=event.payment_id,
            amount=event.amount,
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_cancelled_handler = OrderCancelledHandler()
refund_requested_handler = RefundRequestedHandler()
