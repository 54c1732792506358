"""Delivery repositories package."""

from modules.delivery.repositories.django_repository import (
    DeliverySettingsDjangoRepository,
)
from modules.delivery.repositories.interfaces import IDeliverySettingsRepository

__all__ = ["DeliverySettingsDjangoRepository", "IDeliverySettingsRepository"]
