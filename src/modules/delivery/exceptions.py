"""Delivery domain exceptions."""

from __future__ import annotations


class DeliverySettingsNotConfigured(Exception):
    """No delivery settings row exists; charges cannot be computed."""


class InvalidPincode(Exception):
    """The destination pincode is not a six-digit Indian pincode."""

    def __init__(self, pincode: str) -> None:
        self.pincode = pincode
        super().__init__(f"Invalid pincode: {pincode!r}.")
