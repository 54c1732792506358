"""Optimistic concurrency for order status changes.

Every status change carries the version the caller last read.  The change
is persisted with one compare-and-set write; a caller holding a stale
version gets ``VersionConflict`` with the version now stored and must
reload before trying again.  Nothing here retries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict
from uuid import UUID

import structlog
from django.db import transaction

from modules.orders.events import OrderStatusChanged
from modules.orders.exceptions import OrderNotFound, VersionConflict

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StatusMutation:
    """What a successful transition writes to the order row."""

    status: str
    fields: Dict[str, Any] = field(default_factory=dict)
    notes: str = ""


Mutation = Callable[["Order"], StatusMutation]


class ConcurrencyGuard:
    def __init__(self, repository: IOrderRepository) -> None:
        self._repo = repository

    def apply(
        self,
        order_id: UUID,
        expected_version: int,
        mutation: Mutation,
        updated_by: str = "",
    ) -> Order:
        """Apply *mutation* to the order if it is still at *expected_version*.

        *mutation* receives the current order, validates the change and
        returns the fields to write; it must not touch the database.  On
        success the returned order carries ``version == expected_version + 1``,
        a new history entry and a pending ``OrderStatusChanged`` event.

        Raises:
            OrderNotFound: the order does not exist.
            VersionConflict: the stored version differs from
                *expected_version*, before or at the write.
        """
        log = logger.bind(order_id=str(order_id), expected_version=expected_version)

        with transaction.atomic():
            current = self._repo.get_by_id(str(order_id))
            if current is None:
                raise OrderNotFound(f"Order {order_id} not found.")
            if current.version != expected_version:
                log.info("order.version_conflict", current_version=current.version)
                raise VersionConflict(current.version)

            change = mutation(current)
            rows = self._repo.conditional_update_status(
                current.id, expected_version, {"status": change.status, **change.fields}
            )
            if rows == 0:
                fresh_version = self._repo.get_version(current.id)
                if fresh_version is None:
                    raise OrderNotFound(f"Order {order_id} not found.")
                log.info("order.version_conflict", current_version=fresh_version)
                raise VersionConflict(fresh_version)

            self._repo.add_history(
                current.id,
                new_status=change.status,
                old_status=current.status,
                notes=change.notes,
                updated_by=updated_by,
            )
            updated = self._repo.get_by_id(str(current.id))

        updated.add_domain_event(
            OrderStatusChanged(
                aggregate_id=updated.id,
                old_status=current.status,
                new_status=updated.status,
                version=updated.version,
            )
        )
        log.info(
            "order.status_applied",
            old_status=current.status,
            new_status=updated.status,
            version=updated.version,
        )
        return updated
