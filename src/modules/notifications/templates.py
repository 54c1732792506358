"""Plain-text renderings of order notifications.

``render`` is pure: it reads the order and returns the subject and body.
Sending the message is someone else's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict

from modules.notifications.constants import STORE_NAME, NotificationKind
from modules.orders.constants import OrderStatus

if TYPE_CHECKING:
    from modules.orders.models import Order


@dataclass(frozen=True)
class RenderedMessage:
    kind: str
    subject: str
    body: str


def format_inr(amount: Decimal) -> str:
    return f"₹{amount:,.2f}"


def kind_for_status(status: str) -> NotificationKind:
    """Notification sent after an order moves to *status*."""
    return {
        OrderStatus.SHIPPED: NotificationKind.SHIPPED,
        OrderStatus.DELIVERED: NotificationKind.DELIVERED,
        OrderStatus.CANCELLED: NotificationKind.CANCELLATION,
    }.get(status, NotificationKind.STATUS_UPDATE)


def _greeting(order: Order) -> str:
    name = (order.shipping_address or {}).get("name") or "there"
    return f"Hi {name},"


def _summary(order: Order) -> list[str]:
    lines = []
    for item in order.items.all():
        label = item.product_name
        if item.variant_name:
            label = f"{label} ({item.variant_name})"
        lines.append(f"  {label} x{item.quantity}  {format_inr(item.subtotal)}")
    lines.append(f"Subtotal: {format_inr(order.subtotal)}")
    if order.discount:
        coupon = f" ({order.coupon_code})" if order.coupon_code else ""
        lines.append(f"Discount{coupon}: -{format_inr(order.discount)}")
    lines.append(f"Delivery: {format_inr(order.delivery_charge)}")
    lines.append(f"Tax: {format_inr(order.tax)}")
    lines.append(f"Total: {format_inr(order.total)}")
    return lines


def _order_confirmation(order: Order) -> RenderedMessage:
    body = [
        _greeting(order),
        "",
        f"Thank you for shopping with {STORE_NAME}. "
        f"Your order {order.order_number} has been received.",
        "",
        *_summary(order),
    ]
    if order.payment_method == "cod":
        body += ["", f"Please keep {format_inr(order.total)} ready at delivery."]
    return RenderedMessage(
        kind=NotificationKind.ORDER_CONFIRMATION,
        subject=f"Order {order.order_number} confirmed",
        body="\n".join(body),
    )


def _status_update(order: Order) -> RenderedMessage:
    label = OrderStatus(order.status).label.lower()
    return RenderedMessage(
        kind=NotificationKind.STATUS_UPDATE,
        subject=f"Order {order.order_number} is {label}",
        body="\n".join(
            [_greeting(order), "", f"Your order {order.order_number} is now {label}."]
        ),
    )


def _shipped(order: Order) -> RenderedMessage:
    body = [
        _greeting(order),
        "",
        f"Good news! Your order {order.order_number} is on its way.",
        f"Tracking number: {order.tracking_number}",
    ]
    if order.courier_name:
        body.append(f"Courier: {order.courier_name}")
    if order.tracking_url:
        body.append(f"Track it here: {order.tracking_url}")
    return RenderedMessage(
        kind=NotificationKind.SHIPPED,
        subject=f"Order {order.order_number} has shipped",
        body="\n".join(body),
    )


def _delivered(order: Order) -> RenderedMessage:
    return RenderedMessage(
        kind=NotificationKind.DELIVERED,
        subject=f"Order {order.order_number} delivered",
        body="\n".join(
            [
                _greeting(order),
                "",
                f"Your order {order.order_number} has been delivered. "
                f"We hope you love it!",
            ]
        ),
    )


def _cancellation(order: Order) -> RenderedMessage:
    body = [_greeting(order), "", f"Your order {order.order_number} has been cancelled."]
    if order.cancellation_reason:
        body.append(f"Reason: {order.cancellation_reason}")
    if order.payment_status == "refunded":
        body.append(
            f"A refund of {format_inr(order.total)} has been initiated to your "
            f"original payment method."
        )
    return RenderedMessage(
        kind=NotificationKind.CANCELLATION,
        subject=f"Order {order.order_number} cancelled",
        body="\n".join(body),
    )


def _admin_new_order(order: Order) -> RenderedMessage:
    address = order.shipping_address or {}
    body = [
        f"New order {order.order_number} received.",
        "",
        f"Customer: {address.get('name', '')} ({address.get('phone', '')})",
        f"Ship to: {address.get('city', '')} {address.get('pincode', '')}"
        f" ({order.delivery_zone})",
        f"Payment: {order.payment_method} / {order.payment_status}",
        "",
        *_summary(order),
    ]
    return RenderedMessage(
        kind=NotificationKind.ADMIN_NEW_ORDER,
        subject=f"New Order Received - {order.order_number}",
        body="\n".join(body),
    )


_RENDERERS: Dict[str, Callable[[Order], RenderedMessage]] = {
    NotificationKind.ORDER_CONFIRMATION: _order_confirmation,
    NotificationKind.STATUS_UPDATE: _status_update,
    NotificationKind.SHIPPED: _shipped,
    NotificationKind.DELIVERED: _delivered,
    NotificationKind.CANCELLATION: _cancellation,
    NotificationKind.ADMIN_NEW_ORDER: _admin_new_order,
}


def render(kind: str, order: Order) -> RenderedMessage:
    """Render the *kind* notification for *order*.

    Raises ``ValueError`` for an unknown kind.
    """
    try:
        renderer = _RENDERERS[NotificationKind(kind)]
    except ValueError:
        raise ValueError(f"Unknown notification kind: {kind!r}") from None
    return renderer(order)
