"""Coupon repository interface."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.coupons.models import Coupon


class ICouponRepository(IRepository["Coupon"]):
    @abstractmethod
    def find_by_code(self, code: str) -> Optional[Coupon]:
        """Case-insensitive look-up; returns inactive coupons too."""

    @abstractmethod
    def find_eligible(self, subtotal: Decimal, now: datetime) -> List[Coupon]:
        """Active, in-window, not exhausted coupons with ``min_order_value <= subtotal``.

        Ordered by code; ranking by discount is left to the caller.
        """

    @abstractmethod
    def redeem(self, code: str) -> bool:
        """Atomically increment ``usage_count`` if the limit allows it.

        Returns ``False`` when no row was updated (unknown code or limit
        reached).
        """
