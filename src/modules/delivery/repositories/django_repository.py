"""Django ORM implementation of the delivery settings repository."""

from __future__ import annotations

from typing import Optional

import structlog

from modules.delivery.models import DeliverySettings
from modules.delivery.repositories.interfaces import IDeliverySettingsRepository

logger = structlog.get_logger(__name__)


class DeliverySettingsDjangoRepository(IDeliverySettingsRepository):
    def get_current(self) -> Optional[DeliverySettings]:
        return DeliverySettings.objects.order_by("-updated_at").first()

    def save(self, entity: DeliverySettings) -> DeliverySettings:
        entity.save()
        logger.info("delivery_settings.saved", settings_id=str(entity.id))
        return entity
