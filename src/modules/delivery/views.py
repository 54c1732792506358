"""Delivery API views."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.delivery.dtos import Location, UpdateDeliverySettingsDTO
from modules.delivery.exceptions import DeliverySettingsNotConfigured, InvalidPincode
from modules.delivery.repositories.django_repository import (
    DeliverySettingsDjangoRepository,
)
from modules.delivery.serializers import (
    DeliveryQuoteRequestSerializer,
    DeliverySettingsSerializer,
)
from modules.delivery.services import DeliverySettingsService

_NOT_CONFIGURED = {"detail": "Delivery settings have not been configured."}


class DeliveryViewSet(ViewSet):
    """Delivery quotes for checkout plus admin settings management."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DeliverySettingsService(DeliverySettingsDjangoRepository())

    def get_permissions(self):
        if self.action == "configuration":
            return [IsAdminUser()]
        return [IsAuthenticated()]

    @action(detail=False, methods=["post"])
    def quote(self, request: Request) -> Response:
        """POST /api/v1/delivery/quote/"""
        serializer = DeliveryQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        subtotal = data.pop("subtotal")

        try:
            result = self._service.quote(Location(**data), subtotal)
        except InvalidPincode as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except DeliverySettingsNotConfigured:
            return Response(_NOT_CONFIGURED, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(result.model_dump(mode="json"))

    @action(detail=False, methods=["get", "put"], url_path="settings")
    def configuration(self, request: Request) -> Response:
        """GET/PUT /api/v1/delivery/settings/"""
        if request.method == "GET":
            try:
                current = self._service.get_settings()
            except DeliverySettingsNotConfigured:
                return Response(_NOT_CONFIGURED, status=status.HTTP_404_NOT_FOUND)
            return Response(DeliverySettingsSerializer(current).data)

        serializer = DeliverySettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = UpdateDeliverySettingsDTO(**serializer.validated_data)
            current = self._service.update_settings(dto, updated_by=str(request.user.pk))
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except InvalidPincode as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(DeliverySettingsSerializer(current).data)
