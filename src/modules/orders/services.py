"""Order service layer (use cases).

- ``create_from_session``: turn a consumed checkout session plus a
  payment result into a persisted order.  Items are re-priced against the
  catalog and the totals recomputed; any disagreement with what the
  customer was shown rejects the order.
- ``update_status`` / ``cancel``: admin transitions through the state
  machine and the optimistic concurrency guard.

Notifications are rendered after the transaction commits so a failed
write never produces a message.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.checkout.dtos import CheckoutLine
from modules.notifications.constants import NotificationKind
from modules.notifications.templates import kind_for_status
from modules.orders.concurrency import ConcurrencyGuard, StatusMutation
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.dtos import StatusUpdateRequest
from modules.orders.events import OrderCancelled, OrderCreated, RefundRequested
from modules.orders.exceptions import (
    DuplicateIdempotencyKey,
    IllegalTransition,
    OrderNotFound,
    OrderValidationError,
    PaymentFailed,
    PricingMismatch,
)
from modules.orders.state_machine import OrderStateMachine
from modules.pricing.engine import items_subtotal, totals_match

if TYPE_CHECKING:
    from modules.checkout.dtos import CheckoutSession
    from modules.checkout.services import CatalogPricer, CheckoutPricing
    from modules.coupons.services import CouponValidator
    from modules.notifications.services import OrderNotifier
    from modules.orders.dtos import PaymentConfirmationDTO, ShippingAddressDTO
    from modules.orders.models import Order
    from modules.orders.payments import IPaymentVerifier
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        pricer: CatalogPricer,
        pricing: CheckoutPricing,
        coupon_validator: CouponValidator,
        notifier: OrderNotifier,
        payment_verifier: IPaymentVerifier,
        state_machine: Optional[OrderStateMachine] = None,
    ) -> None:
        self._order_repo = order_repository
        self._pricer = pricer
        self._pricing = pricing
        self._coupons = coupon_validator
        self._notifier = notifier
        self._payments = payment_verifier
        self._state_machine = state_machine or OrderStateMachine()
        self._guard = ConcurrencyGuard(order_repository)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_from_session(
        self,
        session: CheckoutSession,
        shipping_address: ShippingAddressDTO,
        payment: PaymentConfirmationDTO,
        coupon_code: Optional[str] = None,
        user_id: str = "",
        quoted_total: Optional[Decimal] = None,
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """Create an order from a checkout session.

        Online orders whose payment succeeded start ``confirmed``/``paid``;
        cash-on-delivery orders start ``pending``/``pending``.

        Raises:
            PaymentFailed: the online payment did not succeed, or its
                gateway signature does not verify.
            OrderValidationError: the session has no items.
            ProductNotFound, InactiveProduct, VariantNotFound: an item can
                no longer be sold.
            PricingMismatch: the session subtotal or *quoted_total*
                disagrees with the server computation.
            CouponError: the coupon is invalid or was used up meanwhile.
            InvalidPincode, DeliverySettingsNotConfigured: delivery cannot
                be priced.
        """
        log = logger.bind(session_id=session.session_id, user_id=user_id)

        if idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(idempotency_key)
            if existing:
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return existing

        if payment.requires_verification:
            if payment.status != "succeeded":
                log.warning("order.payment_failed", payment_id=payment.payment_id)
                raise PaymentFailed("Payment was not successful; no order was created.")
            if not self._payments.verify(payment):
                log.warning("order.payment_unverified", payment_id=payment.payment_id)
                raise PaymentFailed("Payment could not be verified; no order was created.")
        if not session.items:
            raise OrderValidationError("Order must have at least one item.")

        items = self._pricer.price_lines(
            CheckoutLine(
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
            )
            for item in session.items
        )
        subtotal = items_subtotal((i.unit_price, i.quantity) for i in items)
        if not totals_match(session.subtotal, subtotal):
            log.warning(
                "order.pricing_mismatch",
                field="subtotal",
                client=str(session.subtotal),
                server=str(subtotal),
            )
            raise PricingMismatch("subtotal", session.subtotal, subtotal)

        quote = self._pricing.quote(subtotal, shipping_address.location, coupon_code)
        breakdown = quote.breakdown
        if quoted_total is not None and not totals_match(quoted_total, breakdown.total):
            log.warning(
                "order.pricing_mismatch",
                field="total",
                client=str(quoted_total),
                server=str(breakdown.total),
            )
            raise PricingMismatch("total", quoted_total, breakdown.total)

        if payment.method == PaymentMethod.COD:
            status, payment_status = OrderStatus.PENDING, PaymentStatus.PENDING
        else:
            status, payment_status = OrderStatus.CONFIRMED, PaymentStatus.PAID

        try:
            with transaction.atomic():
                order = self._order_repo.create(
                    {
                        "user_id": user_id,
                        "status": status,
                        "payment_status": payment_status,
                        "payment_method": payment.method,
                        "payment_id": payment.payment_id,
                        "subtotal": breakdown.subtotal,
                        "discount": breakdown.discount,
                        "delivery_charge": breakdown.delivery_charge,
                        "tax": breakdown.tax,
                        "total": breakdown.total,
                        "coupon_code": quote.coupon.code if quote.coupon else "",
                        "shipping_address": shipping_address.model_dump(mode="json"),
                        "delivery_pincode": shipping_address.pincode,
                        "delivery_zone": quote.delivery.zone.value,
                        "idempotency_key": idempotency_key,
                        "items": [
                            {
                                "product_id": item.product_id,
                                "variant_id": item.variant_id,
                                "product_name": item.product_name,
                                "variant_name": item.variant_name,
                                "quantity": item.quantity,
                                "unit_price": item.unit_price,
                            }
                            for item in items
                        ],
                    }
                )
                if quote.coupon:
                    self._coupons.redeem(quote.coupon.code)

                self._order_repo.add_history(
                    order.id,
                    new_status=status,
                    notes="Order placed",
                    updated_by=user_id,
                )
                order.add_domain_event(
                    OrderCreated(
                        aggregate_id=order.id,
                        order_number=order.order_number,
                        status=status,
                        total=str(breakdown.total),
                    )
                )
                self._order_repo.publish_events(order)
        except DuplicateIdempotencyKey:
            # Lost a race with a request carrying the same key.
            existing = self._order_repo.get_by_idempotency_key(idempotency_key)
            if existing is None:
                raise
            log.info("order.idempotency_hit", order_id=str(existing.id))
            return existing

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            status=status,
            total=str(breakdown.total),
        )
        order = self._order_repo.get_by_id(str(order.id)) or order
        self._notifier.notify(NotificationKind.ORDER_CONFIRMATION, order)
        self._notifier.notify(NotificationKind.ADMIN_NEW_ORDER, order)
        return order

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def update_status(self, request: StatusUpdateRequest) -> Order:
        """Move an order to ``request.new_status``.

        Raises:
            OrderNotFound: the order does not exist.
            VersionConflict: ``request.expected_version`` is stale.
            OrderValidationError: unknown status, or shipping without a
                tracking number.
            IllegalTransition: the status is not reachable.
        """
        with transaction.atomic():
            order = self._guard.apply(
                request.order_id,
                request.expected_version,
                lambda current: self._transition(current, request),
                updated_by=request.updated_by,
            )
            if order.status == OrderStatus.CANCELLED:
                order.add_domain_event(
                    OrderCancelled(aggregate_id=order.id, reason=order.cancellation_reason)
                )
                if order.payment_status == PaymentStatus.REFUNDED:
                    order.add_domain_event(
                        RefundRequested(
                            aggregate_id=order.id,
                            payment_id=order.payment_id,
                            amount=str(order.total),
                        )
                    )
            self._order_repo.publish_events(order)

        self._notifier.notify(kind_for_status(order.status), order)
        return order

    def cancel(
        self,
        order_id: UUID,
        reason: str,
        expected_version: int,
        updated_by: str = "",
    ) -> Order:
        """Cancel a pending or confirmed order.

        Raises:
            IllegalTransition: the order is past ``confirmed``.
        """
        return self.update_status(
            StatusUpdateRequest(
                order_id=order_id,
                new_status=OrderStatus.CANCELLED,
                expected_version=expected_version,
                notes=reason,
                updated_by=updated_by,
            )
        )

    def _transition(self, current: Order, request: StatusUpdateRequest) -> StatusMutation:
        new_status = request.new_status
        if new_status == OrderStatus.CANCELLED and not self._state_machine.can_cancel(
            current.status
        ):
            raise IllegalTransition(current.status, new_status)
        self._state_machine.validate(current.status, new_status, request.tracking_number)

        fields: Dict[str, Any] = {}
        if new_status == OrderStatus.SHIPPED:
            fields["tracking_number"] = request.tracking_number.strip()
            fields["tracking_url"] = request.tracking_url or ""
            fields["courier_name"] = request.courier_name or ""
        elif new_status == OrderStatus.CANCELLED:
            fields["cancelled_at"] = timezone.now()
            fields["cancellation_reason"] = request.notes
            if current.was_paid:
                fields["payment_status"] = PaymentStatus.REFUNDED
        elif (
            new_status == OrderStatus.DELIVERED
            and current.payment_method == PaymentMethod.COD
        ):
            fields["payment_status"] = PaymentStatus.PAID

        return StatusMutation(status=new_status, fields=fields, notes=request.notes)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        return self._order_repo.list(filters)

    def find_by_idempotency_key(self, key: Optional[str]) -> Optional[Order]:
        if not key:
            return None
        return self._order_repo.get_by_idempotency_key(key)


def default_order_service() -> OrderService:
    """OrderService wired to the Django repositories."""
    from modules.checkout.services import CatalogPricer, default_checkout_pricing
    from modules.coupons.repositories.django_repository import CouponDjangoRepository
    from modules.coupons.services import CouponValidator
    from modules.notifications.services import OrderNotifier
    from modules.orders.payments import default_payment_verifier
    from modules.orders.repositories.django_repository import OrderDjangoRepository
    from modules.products.repositories.django_repository import ProductDjangoRepository

    return OrderService(
        order_repository=OrderDjangoRepository(),
        pricer=CatalogPricer(ProductDjangoRepository()),
        pricing=default_checkout_pricing(),
        coupon_validator=CouponValidator(CouponDjangoRepository()),
        notifier=OrderNotifier(),
        payment_verifier=default_payment_verifier(),
    )
