"""Order API views.

Exposes ``OrderService`` via HTTP.  Domain exceptions are translated into
HTTP status codes with a ``detail`` message and a machine-readable
``code``; conflicts carry the current version so the admin UI can reload.
"""

from __future__ import annotations

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.orders.dtos import StatusUpdateRequest
from modules.orders.exceptions import (
    IllegalTransition,
    OrderError,
    OrderNotFound,
    OrderValidationError,
    PaymentFailed,
    PricingMismatch,
    VersionConflict,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.serializers import (
    CancelOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    StatusUpdateSerializer,
)
from modules.orders.services import default_order_service

_ERROR_STATUS = {
    OrderNotFound: status.HTTP_404_NOT_FOUND,
    OrderValidationError: status.HTTP_400_BAD_REQUEST,
    IllegalTransition: status.HTTP_400_BAD_REQUEST,
    VersionConflict: status.HTTP_409_CONFLICT,
    PaymentFailed: status.HTTP_402_PAYMENT_REQUIRED,
    PricingMismatch: status.HTTP_409_CONFLICT,
}


def error_response(exc: OrderError) -> Response:
    body = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, VersionConflict):
        body["current_version"] = exc.current_version
    elif isinstance(exc, PricingMismatch):
        body.update(
            field=exc.field,
            client_value=str(exc.expected),
            server_value=str(exc.actual),
        )
    return Response(body, status=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST))


def _parse_uuid(pk: str | None) -> UUID | None:
    try:
        return UUID(str(pk))
    except ValueError:
        return None


class OrderViewSet(GenericViewSet):
    """Admin order management plus order detail for its owner.

    Does **not** extend ``ModelViewSet``: every write goes through the
    service layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "user_id", "delivery_pincode"]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = default_order_service()

    def get_permissions(self):
        if self.action in {"retrieve", "cancel"}:
            return [IsAuthenticated()]
        return [IsAdminUser()]

    def get_throttles(self) -> list[BaseThrottle]:
        if self.action in {"update_status", "cancel"}:
            self.throttle_scope = "order_status_update"
        elif self.action in {"list", "retrieve"}:
            self.throttle_scope = "order_listing"
        else:
            self.throttle_scope = None
        return super().get_throttles()

    def get_queryset(self):
        return Order.objects.prefetch_related("items", "status_history")

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OrderListSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/

        Customers only see their own orders; anything else is a 404.
        """
        try:
            order = self._service.get_order(str(pk))
            self._check_owner(request, order)
        except OrderNotFound as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/"""
        order_id = _parse_uuid(pk)
        if order_id is None:
            return Response(
                {"detail": "Invalid order ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            update = StatusUpdateRequest(
                order_id=order_id,
                updated_by=str(request.user.pk),
                **serializer.validated_data,
            )
            order = self._service.update_status(update)
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except OrderError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Admins may cancel any order; customers only their own.
        """
        order_id = _parse_uuid(pk)
        if order_id is None:
            return Response(
                {"detail": "Invalid order ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self._check_owner(request, self._service.get_order(str(order_id)))
            order = self._service.cancel(
                order_id,
                reason=serializer.validated_data["reason"],
                expected_version=serializer.validated_data["expected_version"],
                updated_by=str(request.user.pk),
            )
        except OrderError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    @staticmethod
    def _check_owner(request: Request, order: Order) -> None:
        if request.user.is_staff:
            return
        if order.user_id != str(request.user.pk):
            raise OrderNotFound(f"Order {order.id} not found.")
