"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
atomic creation with items, the conditional status write used for
optimistic concurrency, status history and the outbox.

The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` holds the order columns plus ``items``: a list of dicts
        with ``product_id``, ``variant_id``, ``product_name``,
        ``variant_name``, ``quantity`` and ``unit_price``.

        Raises ``DuplicateIdempotencyKey`` when ``idempotency_key`` is
        already taken, ``PersistenceError`` for other write failures.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters."""

    @abstractmethod
    def get_version(self, id: UUID) -> Optional[int]:
        """Currently persisted version, or ``None`` if the order is gone."""

    @abstractmethod
    def conditional_update_status(
        self, id: UUID, expected_version: int, fields: Dict[str, Any]
    ) -> int:
        """Write *fields* and ``version = expected_version + 1`` in one
        statement, only where the stored version equals *expected_version*.

        Returns the number of affected rows (0 or 1).
        """

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        updated_by: str = "",
    ) -> OrderStatusHistory:
        """Append a status change to the order's audit trail."""

    @abstractmethod
    def publish_events(self, order: Order) -> int:
        """Write the order's pending domain events to the outbox."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key."""
