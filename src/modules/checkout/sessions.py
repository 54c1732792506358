"""Checkout sessions: priced, read-once snapshots.

A session is created when the customer clicks "buy now" (or proceeds
from the cart) and consumed exactly once when the order is placed.
Sessions live in the Django cache with ``CHECKOUT_SESSION_TTL``; an
unconsumed session simply expires.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Iterable, Optional

import structlog
from django.conf import settings
from django.core.cache import cache as default_cache
from django.utils import timezone

from modules.checkout.dtos import CheckoutItem, CheckoutSession, SessionSource
from modules.checkout.exceptions import CheckoutSessionNotFound, EmptyCheckout
from modules.pricing.constants import DEFAULT_TAX_RATE
from modules.pricing.engine import compute_totals, items_subtotal

logger = structlog.get_logger(__name__)

_KEY_PREFIX = "checkout:session:"


def build_session(
    items: Iterable[CheckoutItem],
    source: SessionSource = "buy_now",
    owner_id: str = "",
    tax_rate: Optional[Decimal] = None,
) -> CheckoutSession:
    """Price *items* into a new session with a tax preview.

    Coupon and delivery are not known yet, so ``total`` is
    ``subtotal + tax`` on the bare subtotal.
    """
    items = tuple(item.model_copy() for item in items)
    if not items:
        raise EmptyCheckout("A checkout needs at least one item.")
    if tax_rate is None:
        tax_rate = getattr(settings, "ORDER_TAX_RATE", DEFAULT_TAX_RATE)

    breakdown = compute_totals(
        items_subtotal((i.unit_price, i.quantity) for i in items), tax_rate=tax_rate
    )
    return CheckoutSession(
        session_id=uuid.uuid4().hex,
        items=items,
        subtotal=breakdown.subtotal,
        tax=breakdown.tax,
        total=breakdown.total,
        created_at=timezone.now(),
        source=source,
        owner_id=owner_id,
    )


class CheckoutSessionStore:
    """Cache-backed session store with read-once consumption."""

    def __init__(self, cache=None, ttl: Optional[int] = None) -> None:
        self._cache = cache or default_cache
        self._ttl = ttl if ttl is not None else getattr(settings, "CHECKOUT_SESSION_TTL", 1800)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{_KEY_PREFIX}{session_id}"

    def save(self, session: CheckoutSession) -> CheckoutSession:
        self._cache.set(
            self._key(session.session_id), session.model_dump(mode="json"), self._ttl
        )
        logger.info(
            "checkout.session_saved",
            session_id=session.session_id,
            source=session.source,
            item_count=len(session.items),
        )
        return session

    def peek(self, session_id: str, owner_id: Optional[str] = None) -> CheckoutSession:
        """Read a session without consuming it."""
        raw = self._cache.get(self._key(session_id))
        if raw is None:
            raise CheckoutSessionNotFound(session_id)
        session = CheckoutSession.model_validate(raw)
        if owner_id is not None and session.owner_id != owner_id:
            raise CheckoutSessionNotFound(session_id)
        return session

    def consume(self, session_id: str, owner_id: Optional[str] = None) -> CheckoutSession:
        """Read and discard a session.

        When two consumers race, the one whose delete removes the key
        wins; the other gets ``CheckoutSessionNotFound``.
        """
        session = self.peek(session_id, owner_id)
        if not self._cache.delete(self._key(session_id)):
            logger.warning("checkout.session_already_consumed", session_id=session_id)
            raise CheckoutSessionNotFound(session_id)
        logger.info("checkout.session_consumed", session_id=session_id)
        return session
