"""Django ORM implementation of the Coupon repository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db.models import F, Q
from django.utils import timezone

from modules.coupons.models import Coupon
from modules.coupons.repositories.interfaces import ICouponRepository

logger = structlog.get_logger(__name__)

_USAGE_AVAILABLE = Q(usage_limit__isnull=True) | Q(usage_count__lt=F("usage_limit"))


class CouponDjangoRepository(ICouponRepository):
    def get_by_id(self, id: str) -> Optional[Coupon]:
        try:
            return Coupon.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def find_by_code(self, code: str) -> Optional[Coupon]:
        return Coupon.objects.filter(code=Coupon.normalize_code(code)).first()

    def find_eligible(self, subtotal: Decimal, now: datetime) -> List[Coupon]:
        queryset = (
            Coupon.objects.filter(
                is_active=True,
                valid_from__lte=now,
                valid_until__gte=now,
                min_order_value__lte=subtotal,
            )
            .filter(_USAGE_AVAILABLE)
            .order_by("code")
        )
        return list(queryset)

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Coupon]:
        queryset = Coupon.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def save(self, entity: Coupon) -> Coupon:
        entity.save()
        logger.info("coupon.saved", coupon_id=str(entity.id), code=entity.code)
        return entity

    def redeem(self, code: str) -> bool:
        """Single conditional ``UPDATE``: no read-then-write window."""
        updated = (
            Coupon.objects.filter(code=Coupon.normalize_code(code))
            .filter(_USAGE_AVAILABLE)
            .update(usage_count=F("usage_count") + 1, updated_at=timezone.now())
        )
        logger.info("coupon.redeem_attempted", code=code, updated=updated)
        return updated == 1
