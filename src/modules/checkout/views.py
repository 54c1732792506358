"""Checkout API views: buy-now sessions, live quotes and order placement."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.checkout.dtos import CheckoutLine
from modules.checkout.exceptions import CheckoutSessionNotFound, EmptyCheckout
from modules.checkout.serializers import (
    PlaceOrderSerializer,
    QuoteSerializer,
    StartSessionSerializer,
)
from modules.checkout.services import default_checkout_service
from modules.checkout.sessions import CheckoutSessionStore
from modules.coupons.exceptions import CouponError
from modules.delivery.exceptions import DeliverySettingsNotConfigured, InvalidPincode
from modules.orders.dtos import PaymentConfirmationDTO, ShippingAddressDTO
from modules.orders.exceptions import OrderError
from modules.orders.serializers import OrderSerializer
from modules.orders.services import default_order_service
from modules.orders.views import error_response
from modules.products.exceptions import InactiveProduct, ProductNotFound, VariantNotFound


def _lines(items) -> list[CheckoutLine]:
    return [
        CheckoutLine(
            product_id=str(item["product_id"]),
            variant_id=str(item["variant_id"]) if item.get("variant_id") else None,
            quantity=item["quantity"],
        )
        for item in items
    ]


def _checkout_error(exc: Exception) -> Response:
    """Translate errors shared by every checkout action."""
    if isinstance(exc, CouponError):
        return Response(
            {"detail": str(exc), **exc.as_dict()}, status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, ProductNotFound):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, DeliverySettingsNotConfigured):
        return Response(
            {"detail": "Delivery settings have not been configured."},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


_CHECKOUT_ERRORS = (
    CouponError,
    ProductNotFound,
    InactiveProduct,
    VariantNotFound,
    InvalidPincode,
    DeliverySettingsNotConfigured,
    EmptyCheckout,
)


class CheckoutViewSet(ViewSet):
    permission_classes = [IsAuthenticated]
    throttle_scope = "checkout"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._checkout = default_checkout_service()
        self._orders = default_order_service()
        self._sessions = CheckoutSessionStore()

    @action(detail=False, methods=["post"])
    def sessions(self, request: Request) -> Response:
        """POST /api/v1/checkout/sessions/"""
        serializer = StartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            session = self._checkout.start_session(
                _lines(serializer.validated_data["items"]),
                source=serializer.validated_data["source"],
                owner_id=str(request.user.pk),
            )
        except _CHECKOUT_ERRORS as exc:
            return _checkout_error(exc)
        return Response(session.model_dump(mode="json"), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def quote(self, request: Request) -> Response:
        """POST /api/v1/checkout/quote/"""
        serializer = QuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            address = ShippingAddressDTO(**data["shipping_address"])
            result = self._checkout.quote(
                _lines(data["items"]), address.location, data.get("coupon_code") or None
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except _CHECKOUT_ERRORS as exc:
            return _checkout_error(exc)
        return Response(result.as_dict())

    @action(detail=False, methods=["post"])
    def orders(self, request: Request) -> Response:
        """POST /api/v1/checkout/orders/

        Consumes the session: a session places at most one order.  Supports
        idempotency via the ``Idempotency-Key`` header; a replay returns the
        existing order with 200.
        """
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user_id = str(request.user.pk)
        idempotency_key = request.headers.get("Idempotency-Key")

        replay = self._orders.find_by_idempotency_key(idempotency_key)
        if replay is not None:
            if replay.user_id != user_id:
                return Response(
                    {"detail": "Idempotency key already used."},
                    status=status.HTTP_409_CONFLICT,
                )
            return Response(OrderSerializer(replay).data, status=status.HTTP_200_OK)

        try:
            address = ShippingAddressDTO(**data["shipping_address"])
            payment = PaymentConfirmationDTO(**data["payment"])
            session = self._sessions.consume(data["session_id"], owner_id=user_id)
            order = self._orders.create_from_session(
                session,
                address,
                payment,
                coupon_code=data.get("coupon_code") or None,
                user_id=user_id,
                quoted_total=data.get("quoted_total"),
                idempotency_key=idempotency_key,
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except CheckoutSessionNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except OrderError as exc:
            return error_response(exc)
        except _CHECKOUT_ERRORS as exc:
            return _checkout_error(exc)
        if order.user_id != user_id:
            # The key was claimed concurrently by another customer.
            return Response(
                {"detail": "Idempotency key already used."},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
