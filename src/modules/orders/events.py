"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    order_number: str = ""
    status: str = ""
    total: str = "0.00"


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every successful status transition."""

    old_status: str = ""
    new_status: str = ""
    version: int = 0


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled."""

    reason: str = ""


@dataclass(frozen=True)
class RefundRequested(DomainEvent):
    """Raised when a paid order is cancelled and the payment must be refunded."""

    payment_id: str = ""
    amount: str = "0.00"
