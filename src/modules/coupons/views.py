"""Coupon API views.

Validation failures are reported with their discriminating ``code`` and
up to ``COUPON_SUGGESTION_LIMIT`` alternative coupons the customer could
apply to the same subtotal.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.coupons.dtos import CouponSummaryDTO, CreateCouponDTO, UpdateCouponDTO
from modules.coupons.exceptions import (
    CouponAlreadyExists,
    CouponError,
    CouponNotFound,
    InvalidCouponDefinition,
)
from modules.coupons.models import Coupon
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.serializers import (
    CouponSerializer,
    CreateCouponSerializer,
    EligibleCouponsQuerySerializer,
    UpdateCouponSerializer,
    ValidateCouponSerializer,
)
from modules.coupons.services import CouponService, CouponValidator


def _summaries(coupons) -> list[dict]:
    return [
        CouponSummaryDTO.from_entity(coupon).model_dump(mode="json")
        for coupon in coupons
    ]


class CouponViewSet(GenericViewSet):
    """Checkout coupon validation plus admin coupon management."""

    queryset = Coupon.objects.all()
    serializer_class = CouponSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        repository = CouponDjangoRepository()
        self._validator = CouponValidator(repository)
        self._service = CouponService(repository)

    def get_permissions(self):
        if self.action in {"create", "list", "partial_update", "deactivate"}:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = (
            "coupon_validation" if self.action in {"validate", "eligible"} else None
        )
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"])
    def validate(self, request: Request) -> Response:
        """POST /api/v1/coupons/validate/"""
        serializer = ValidateCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        code = serializer.validated_data["code"]
        subtotal = serializer.validated_data["subtotal"]

        try:
            applied = self._validator.validate(code, subtotal)
        except CouponError as exc:
            alternatives = self._validator.find_eligible_coupons(subtotal)
            return Response(
                {
                    "valid": False,
                    **exc.as_dict(),
                    "alternatives": _summaries(
                        c for c in alternatives if c.code != code.strip().upper()
                    ),
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response({"valid": True, "coupon": applied.model_dump(mode="json")})

    @action(detail=False, methods=["get"])
    def eligible(self, request: Request) -> Response:
        """GET /api/v1/coupons/eligible/?subtotal=..."""
        serializer = EligibleCouponsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        coupons = self._validator.find_eligible_coupons(
            serializer.validated_data["subtotal"]
        )
        return Response({"results": _summaries(coupons)})

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(CouponSerializer(page, many=True).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/coupons/"""
        serializer = CreateCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CreateCouponDTO(**serializer.validated_data)
            coupon = self._service.create_coupon(dto, created_by=str(request.user.pk))
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except InvalidCouponDefinition as exc:
            return Response({"detail": exc.errors}, status=status.HTTP_400_BAD_REQUEST)
        except CouponAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/coupons/{code}/"""
        serializer = UpdateCouponSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            dto = UpdateCouponDTO(**serializer.validated_data)
            coupon = self._service.update_coupon(pk or "", dto)
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except CouponNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidCouponDefinition as exc:
            return Response({"detail": exc.errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CouponSerializer(coupon).data)

    @action(detail=True, methods=["post"])
    def deactivate(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/coupons/{code}/deactivate/"""
        try:
            coupon = self._service.deactivate_coupon(pk or "")
        except CouponNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(CouponSerializer(coupon).data)
