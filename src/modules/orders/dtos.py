"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  DTOs are
immutable (``frozen=True``).

- ``ShippingAddressDTO``: where the order ships; also the delivery
  destination used for pricing.
- ``PaymentConfirmationDTO``: outcome reported by the payment gateway,
  with the signature that proves it.
- ``StatusUpdateRequest``: admin status change with the version the
  admin last read.
"""

from __future__ import annotations

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.delivery.dtos import Location
from modules.orders.constants import PaymentMethod


class ShippingAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=10, max_length=15)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    pincode: str
    country: str = "India"
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("name", "phone", "street", "city", "state", "pincode")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()

    @property
    def location(self) -> Location:
        return Location(
            pincode=self.pincode,
            city=self.city,
            state=self.state,
            latitude=self.latitude,
            longitude=self.longitude,
        )


class PaymentConfirmationDTO(BaseModel):
    """Result of the payment step.

    ``status`` is what the client claims; an online payment only counts
    once ``gateway_order_id``, ``payment_id`` and ``signature`` pass the
    gateway check.  Cash-on-delivery orders carry no gateway result.
    """

    model_config = ConfigDict(frozen=True)

    method: PaymentMethod = PaymentMethod.ONLINE
    status: Literal["succeeded", "failed"] = "succeeded"
    payment_id: str = ""
    gateway_order_id: str = ""
    signature: str = ""

    @property
    def requires_verification(self) -> bool:
        return self.method != PaymentMethod.COD


class StatusUpdateRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    new_status: str
    expected_version: int = Field(ge=1)
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None
    courier_name: Optional[str] = None
    notes: str = ""
    updated_by: str = ""

    @field_validator("new_status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower()
