"""Delivery zone resolution and delivery settings use cases.

``DeliveryZoneResolver`` is pure: given an origin, a destination, a subtotal,
the settings row and the current date it returns the zone, the charge and
the expected arrival date.  The settings row itself is loaded (and cached)
by ``DeliverySettingsService``.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import structlog
from django.conf import settings as django_settings
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone

from modules.delivery.constants import (
    DEFAULT_LOCAL_RADIUS_KM,
    DELIVERY_DAYS,
    FREE_SHIPPING_DELIVERY_DAYS,
    PINCODE_PATTERN,
    SETTINGS_CACHE_KEY,
    DeliveryZone,
)
from modules.delivery.dtos import DeliveryQuote, Location
from modules.delivery.exceptions import DeliverySettingsNotConfigured, InvalidPincode
from modules.delivery.geo import haversine_km
from modules.delivery.models import DeliverySettings
from modules.pricing.engine import to_money

if TYPE_CHECKING:
    from modules.delivery.dtos import UpdateDeliverySettingsDTO
    from modules.delivery.repositories.interfaces import IDeliverySettingsRepository

logger = structlog.get_logger(__name__)


def _same(a: str, b: str) -> bool:
    return bool(a) and a.strip().casefold() == b.strip().casefold()


class DeliveryZoneResolver:
    """Classifies a destination relative to the business origin.

    First match wins: same pincode or within ``local_radius_km`` is LOCAL,
    then same city, then same state, otherwise NATIONAL.
    """

    def __init__(self, local_radius_km: float = DEFAULT_LOCAL_RADIUS_KM) -> None:
        self._local_radius_km = local_radius_km

    def resolve_zone(self, origin: Location, destination: Location) -> DeliveryZone:
        if destination.pincode == origin.pincode:
            return DeliveryZone.LOCAL
        if origin.has_coordinates and destination.has_coordinates:
            distance = haversine_km(
                origin.latitude, origin.longitude,
                destination.latitude, destination.longitude,
            )
            if distance <= self._local_radius_km:
                return DeliveryZone.LOCAL
        if _same(destination.city, origin.city) and _same(destination.state, origin.state):
            return DeliveryZone.CITY
        if _same(destination.state, origin.state):
            return DeliveryZone.STATE
        return DeliveryZone.NATIONAL

    def resolve_charge(
        self,
        origin: Location,
        destination: Location,
        subtotal: Decimal,
        settings: DeliverySettings,
        today: Optional[date] = None,
    ) -> DeliveryQuote:
        """Zone, delivery charge and estimated arrival for *destination*.

        Free shipping applies when enabled and ``subtotal`` reaches the
        threshold, regardless of zone.  Arrival is counted from *today*
        (the local date by default).

        Raises:
            InvalidPincode: the destination pincode is malformed.
        """
        if not PINCODE_PATTERN.match(destination.pincode):
            raise InvalidPincode(destination.pincode)

        zone = self.resolve_zone(origin, destination)
        subtotal = to_money(subtotal)
        today = today or timezone.localdate()
        if settings.free_shipping_enabled and subtotal >= settings.free_shipping_threshold:
            return DeliveryQuote(
                zone=zone,
                charge=to_money(0),
                is_free_shipping=True,
                estimated_delivery_date=today + timedelta(days=FREE_SHIPPING_DELIVERY_DAYS),
            )
        return DeliveryQuote(
            zone=zone,
            charge=to_money(settings.charge_for(zone)),
            is_free_shipping=False,
            estimated_delivery_date=today + timedelta(days=DELIVERY_DAYS[zone]),
        )


class DeliverySettingsService:
    """Loads, caches and updates the delivery settings in force."""

    def __init__(
        self,
        repository: IDeliverySettingsRepository,
        resolver: Optional[DeliveryZoneResolver] = None,
    ) -> None:
        self._repo = repository
        self._resolver = resolver or DeliveryZoneResolver(
            getattr(django_settings, "DELIVERY_LOCAL_RADIUS_KM", DEFAULT_LOCAL_RADIUS_KM)
        )

    @property
    def resolver(self) -> DeliveryZoneResolver:
        return self._resolver

    def get_settings(self) -> DeliverySettings:
        """Return the settings row, served from cache when fresh.

        Raises:
            DeliverySettingsNotConfigured: no settings row exists.
        """
        current = cache.get(SETTINGS_CACHE_KEY)
        if current is None:
            current = self._repo.get_current()
            if current is None:
                logger.warning("delivery_settings.missing")
                raise DeliverySettingsNotConfigured(
                    "Delivery settings have not been configured."
                )
            cache.set(
                SETTINGS_CACHE_KEY,
                current,
                getattr(django_settings, "DELIVERY_SETTINGS_CACHE_TTL", 300),
            )
        return current

    @transaction.atomic
    def update_settings(
        self, dto: UpdateDeliverySettingsDTO, updated_by: str = ""
    ) -> DeliverySettings:
        if not PINCODE_PATTERN.match(dto.business_pincode):
            raise InvalidPincode(dto.business_pincode)

        current = self._repo.get_current() or DeliverySettings()
        for field, value in dto.model_dump().items():
            setattr(current, field, value)
        current.updated_by = updated_by
        current = self._repo.save(current)

        cache.delete(SETTINGS_CACHE_KEY)
        transaction.on_commit(lambda: cache.delete(SETTINGS_CACHE_KEY))
        logger.info(
            "delivery_settings.updated",
            settings_id=str(current.id),
            updated_by=updated_by,
        )
        return current

    def quote(self, destination: Location, subtotal: Decimal) -> DeliveryQuote:
        current = self.get_settings()
        result = self._resolver.resolve_charge(
            Location.origin_of(current), destination, subtotal, current
        )
        logger.debug(
            "delivery.quoted",
            pincode=destination.pincode,
            zone=result.zone,
            charge=str(result.charge),
        )
        return result
