"""Unit tests for notification rendering."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.notifications.constants import NotificationKind
from modules.notifications.templates import format_inr, kind_for_status, render
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.dtos import PaymentConfirmationDTO

pytestmark = pytest.mark.unit


class TestFormatting:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("0"), "₹0.00"),
            (Decimal("1375"), "₹1,375.00"),
            (Decimal("1234567.5"), "₹1,234,567.50"),
        ],
    )
    def test_format_inr(self, amount, expected):
        assert format_inr(amount) == expected

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (OrderStatus.CONFIRMED, NotificationKind.STATUS_UPDATE),
            (OrderStatus.PROCESSING, NotificationKind.STATUS_UPDATE),
            (OrderStatus.SHIPPED, NotificationKind.SHIPPED),
            (OrderStatus.DELIVERED, NotificationKind.DELIVERED),
            (OrderStatus.CANCELLED, NotificationKind.CANCELLATION),
        ],
    )
    def test_kind_for_status(self, status, kind):
        assert kind_for_status(status) == kind


class TestRender:
    def test_confirmation(self, place_order, make_coupon):
        make_coupon("SAVE20")
        order = place_order(coupon_code="SAVE20")
        message = render(NotificationKind.ORDER_CONFIRMATION, order)

        assert message.subject == f"Order {order.order_number} confirmed"
        assert message.body.startswith("Hi Priya Sharma,")
        assert "Gold Band x1" in message.body
        assert "Discount (SAVE20): -₹200.00" in message.body
        assert "Total: ₹1,155.00" in message.body
        assert "ready at delivery" not in message.body

    def test_cod_confirmation_reminds_to_pay(self, place_order):
        order = place_order(payment=PaymentConfirmationDTO(method=PaymentMethod.COD))
        message = render(NotificationKind.ORDER_CONFIRMATION, order)
        assert "Please keep ₹1,375.00 ready at delivery." in message.body

    def test_status_update(self, place_order):
        order = place_order()
        order.status = OrderStatus.PROCESSING
        message = render(NotificationKind.STATUS_UPDATE, order)
        assert message.subject == f"Order {order.order_number} is processing"

    def test_shipped_includes_tracking(self, place_order):
        order = place_order()
        order.tracking_number = "AWB42"
        order.courier_name = "Delhivery"
        message = render("shipped", order)

        assert message.subject.endswith("has shipped")
        assert "Tracking number: AWB42" in message.body
        assert "Courier: Delhivery" in message.body
        assert "Track it here" not in message.body

    def test_cancellation_with_refund(self, place_order):
        order = place_order()
        order.cancellation_reason = "Out of stock"
        order.payment_status = PaymentStatus.REFUNDED
        message = render(NotificationKind.CANCELLATION, order)

        assert "Reason: Out of stock" in message.body
        assert "A refund of ₹1,375.00 has been initiated" in message.body

    def test_cancellation_without_refund(self, place_order):
        order = place_order(payment=PaymentConfirmationDTO(method=PaymentMethod.COD))
        message = render(NotificationKind.CANCELLATION, order)
        assert "refund" not in message.body

    def test_delivered(self, place_order):
        order = place_order()
        message = render(NotificationKind.DELIVERED, order)
        assert message.subject == f"Order {order.order_number} delivered"

    def test_unknown_kind(self, place_order):
        with pytest.raises(ValueError, match="Unknown notification kind"):
            render("carrier_pigeon", place_order())


class TestAdminAlert:
    def test_new_order_alert(self, place_order):
        order = place_order()
        message = render(NotificationKind.ADMIN_NEW_ORDER, order)

        assert message.kind == NotificationKind.ADMIN_NEW_ORDER
        assert message.subject == f"New Order Received - {order.order_number}"
        assert "Customer: Priya Sharma (9876543210)" in message.body
        assert "Ship to: Bengaluru 560001 (national)" in message.body
        assert "Payment: online / paid" in message.body
        assert "Total: ₹1,375.00" in message.body

    def test_cod_alert_shows_pending_payment(self, place_order):
        order = place_order(payment=PaymentConfirmationDTO(method=PaymentMethod.COD))
        message = render(NotificationKind.ADMIN_NEW_ORDER, order)
        assert "Payment: cod / pending" in message.body
