"""Coupon use cases: validation, eligibility query, redemption, admin.

Validation is read-only: it may be called on every keystroke of the
checkout coupon field without consuming usage.  ``redeem`` is the only
operation that changes ``usage_count`` and it is called exactly once per
completed order, inside the order-creation transaction.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, List, Optional

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.coupons.constants import DEFAULT_SUGGESTION_LIMIT
from modules.coupons.dtos import AppliedCoupon
from modules.coupons.exceptions import (
    CouponAlreadyExists,
    CouponBelowMinimum,
    CouponError,
    CouponExpired,
    CouponNotFound,
    CouponNotYetValid,
    CouponUsageExhausted,
    InvalidCouponDefinition,
)
from modules.coupons.models import Coupon
from modules.pricing.engine import coupon_discount, to_money

if TYPE_CHECKING:
    from modules.coupons.dtos import CreateCouponDTO, UpdateCouponDTO
    from modules.coupons.repositories.interfaces import ICouponRepository

logger = structlog.get_logger(__name__)


class CouponValidator:
    """Validates coupon codes against a subtotal and a point in time."""

    def __init__(
        self,
        repository: ICouponRepository,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._repo = repository
        self._clock = clock

    def validate(
        self, code: str, subtotal: Decimal, now: Optional[datetime] = None
    ) -> AppliedCoupon:
        """Return the applied coupon or raise the first failing check.

        Order of checks: not found / inactive, not yet valid, expired,
        below minimum order value, usage exhausted.
        """
        now = now or self._clock()
        subtotal = to_money(subtotal)
        normalized = Coupon.normalize_code(code)
        log = logger.bind(code=normalized, subtotal=str(subtotal))

        coupon = self._repo.find_by_code(normalized) if normalized else None
        error = self._first_failure(coupon, normalized, subtotal, now)
        if error is not None:
            log.info("coupon.rejected", reason=error.code)
            raise error

        applied = AppliedCoupon(
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            max_discount=coupon.max_discount,
            discount_amount=self.discount_amount(coupon, subtotal),
        )
        log.info("coupon.validated", discount=str(applied.discount_amount))
        return applied

    @staticmethod
    def _first_failure(
        coupon: Optional[Coupon], code: str, subtotal: Decimal, now: datetime
    ) -> Optional[CouponError]:
        if coupon is None or not coupon.is_active:
            return CouponNotFound(code)
        if now < coupon.valid_from:
            return CouponNotYetValid(coupon.valid_from)
        if now > coupon.valid_until:
            return CouponExpired(coupon.valid_until)
        if subtotal < coupon.min_order_value:
            return CouponBelowMinimum(
                min_order_value=coupon.min_order_value,
                shortfall=to_money(coupon.min_order_value - subtotal),
            )
        if coupon.is_exhausted:
            return CouponUsageExhausted(code)
        return None

    @staticmethod
    def discount_amount(coupon: Coupon, subtotal: Decimal) -> Decimal:
        return coupon_discount(
            coupon.discount_type,
            coupon.discount_value,
            subtotal,
            max_discount=coupon.max_discount,
        )

    def find_eligible_coupons(
        self,
        subtotal: Decimal,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Coupon]:
        """Coupons the customer could use instead, capped at *limit*.

        Ranked by the discount each one actually gives on *subtotal*, so a
        flat rupee amount and a percentage compare on the same footing.
        """
        if limit is None:
            limit = getattr(settings, "COUPON_SUGGESTION_LIMIT", DEFAULT_SUGGESTION_LIMIT)
        if limit <= 0:
            return []
        subtotal = to_money(subtotal)
        candidates = self._repo.find_eligible(subtotal, now or self._clock())
        candidates.sort(key=lambda c: (-self.discount_amount(c, subtotal), c.code))
        return candidates[:limit]

    def redeem(self, code: str) -> None:
        """Consume one use of *code*.

        Must run inside the order-creation transaction so that a failed
        order rolls the increment back.
        """
        normalized = Coupon.normalize_code(code)
        if not self._repo.redeem(normalized):
            if self._repo.find_by_code(normalized) is None:
                raise CouponNotFound(normalized)
            logger.warning("coupon.redeem_exhausted", code=normalized)
            raise CouponUsageExhausted(normalized)
        logger.info("coupon.redeemed", code=normalized)


class CouponService:
    """Admin use cases for coupons."""

    def __init__(self, repository: ICouponRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def create_coupon(self, dto: CreateCouponDTO, created_by: str = "") -> Coupon:
        """Create a coupon.

        Raises:
            CouponAlreadyExists: the code is already taken.
        """
        if self._repo.find_by_code(dto.code):
            raise CouponAlreadyExists(f"Coupon {dto.code} already exists.")

        coupon = Coupon(
            code=dto.code,
            description=dto.description,
            discount_type=dto.discount_type,
            discount_value=dto.discount_value,
            min_order_value=dto.min_order_value,
            max_discount=dto.max_discount,
            valid_from=dto.valid_from,
            valid_until=dto.valid_until,
            usage_limit=dto.usage_limit,
            is_active=dto.is_active,
            created_by=created_by,
        )
        try:
            coupon.full_clean(exclude=["id"], validate_unique=False)
        except ValidationError as exc:
            raise InvalidCouponDefinition(exc.message_dict) from exc
        try:
            with transaction.atomic():
                coupon = self._repo.save(coupon)
        except IntegrityError as exc:
            raise CouponAlreadyExists(f"Coupon {dto.code} already exists.") from exc
        logger.info("coupon.created", code=coupon.code, created_by=created_by)
        return coupon

    @transaction.atomic
    def deactivate_coupon(self, code: str) -> Coupon:
        coupon = self._repo.find_by_code(code)
        if coupon is None:
            raise CouponNotFound(Coupon.normalize_code(code))
        coupon.is_active = False
        coupon.save(update_fields=["is_active"])
        logger.info("coupon.deactivated", code=coupon.code)
        return coupon

    @transaction.atomic
    def update_coupon(self, code: str, dto: UpdateCouponDTO) -> Coupon:
        """Apply a partial edit and re-check every coupon invariant.

        ``usage_count`` is never written here; redemptions keep flowing
        through ``CouponValidator.redeem`` while an admin edits the coupon.

        Raises:
            CouponNotFound: no coupon has *code*.
            InvalidCouponDefinition: the edited coupon breaks an invariant.
        """
        coupon = self._repo.find_by_code(code)
        if coupon is None:
            raise CouponNotFound(Coupon.normalize_code(code))

        changes = dto.changes()
        for field, value in changes.items():
            setattr(coupon, field, value)

        if coupon.usage_limit is not None and coupon.usage_limit < coupon.usage_count:
            raise InvalidCouponDefinition(
                {"usage_limit": "Usage limit cannot be below the current usage count."}
            )
        try:
            coupon.full_clean(exclude=["id"], validate_unique=False)
        except ValidationError as exc:
            raise InvalidCouponDefinition(exc.message_dict) from exc

        if changes:
            coupon.save(update_fields=[*changes, "updated_at"])
        logger.info("coupon.updated", code=coupon.code, fields=sorted(changes))
        return coupon
