"""Django ORM implementation of the Order repository.

Status changes never go through ``Order.save()``: they use a single
``UPDATE ... WHERE id = %s AND version = %s`` so that two admins racing
on the same version cannot both win.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.orders.constants import OUTBOX_TOPIC
from modules.orders.exceptions import DuplicateIdempotencyKey, PersistenceError
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

_RELATIONS = ("items", "status_history")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Order:
        data = dict(data)
        items = data.pop("items", [])
        try:
            with transaction.atomic():
                order = Order(**data)
                order.save()
                for item_data in items:
                    OrderItem(order=order, **item_data).save()
        except IntegrityError as exc:
            key = data.get("idempotency_key")
            if key and Order.objects.filter(idempotency_key=key).exists():
                logger.info("order.idempotency_collision", idempotency_key=key)
                raise DuplicateIdempotencyKey(key) from exc
            logger.error("order.persist_failed", error=str(exc))
            raise PersistenceError(str(exc)) from exc
        except DatabaseError as exc:
            logger.error("order.persist_failed", error=str(exc))
            raise PersistenceError(str(exc)) from exc

        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and history.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Order.objects.prefetch_related(*_RELATIONS).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = Order.objects.prefetch_related(*_RELATIONS)
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def get_version(self, id: UUID) -> Optional[int]:
        return Order.objects.filter(id=id).values_list("version", flat=True).first()

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return (
            Order.objects.prefetch_related(*_RELATIONS)
            .filter(idempotency_key=key)
            .first()
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        entity.save()
        self.publish_events(entity)
        return entity

    def conditional_update_status(
        self, id: UUID, expected_version: int, fields: Dict[str, Any]
    ) -> int:
        try:
            updated = Order.objects.filter(id=id, version=expected_version).update(
                version=F("version") + 1,
                updated_at=timezone.now(),
                **fields,
            )
        except DatabaseError as exc:
            logger.error("order.status_write_failed", order_id=str(id), error=str(exc))
            raise PersistenceError(str(exc)) from exc

        logger.debug(
            "order.conditional_update",
            order_id=str(id),
            expected_version=expected_version,
            rows=updated,
        )
        return updated

    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        updated_by: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            updated_by=updated_by,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def publish_events(self, order: Order) -> int:
        events = order.domain_events
        OutboxEvent.record(events, topic=OUTBOX_TOPIC)
        order.clear_domain_events()
        if events:
            logger.info(
                "order.events_recorded",
                order_id=str(order.id),
                event_count=len(events),
            )
        return len(events)
