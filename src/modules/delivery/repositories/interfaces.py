"""Delivery settings repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from modules.delivery.models import DeliverySettings


class IDeliverySettingsRepository(ABC):
    @abstractmethod
    def get_current(self) -> Optional[DeliverySettings]:
        """Return the settings in force, or ``None`` when never configured."""

    @abstractmethod
    def save(self, entity: DeliverySettings) -> DeliverySettings:
        """Persist the settings row."""
