"""Delivery DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.delivery.constants import DeliveryZone

if TYPE_CHECKING:
    from modules.delivery.models import DeliverySettings


class Location(BaseModel):
    """A point a parcel travels from or to."""

    model_config = ConfigDict(frozen=True)

    pincode: str
    city: str = ""
    state: str = ""
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("pincode", "city", "state")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def origin_of(cls, settings: DeliverySettings) -> Location:
        return cls(
            pincode=settings.business_pincode,
            city=settings.business_city,
            state=settings.business_state,
            latitude=settings.business_latitude,
            longitude=settings.business_longitude,
        )


class DeliveryQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone: DeliveryZone
    charge: Decimal
    is_free_shipping: bool
    estimated_delivery_date: date


class UpdateDeliverySettingsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_pincode: str
    business_city: str
    business_state: str
    business_latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    business_longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    local_delivery_charge: Decimal = Field(ge=0)
    city_delivery_charge: Decimal = Field(ge=0)
    state_delivery_charge: Decimal = Field(ge=0)
    national_delivery_charge: Decimal = Field(ge=0)
    free_shipping_threshold: Decimal = Field(default=Decimal("0.00"), ge=0)
    free_shipping_enabled: bool = False
