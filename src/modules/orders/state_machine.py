"""Order status state machine."""

from __future__ import annotations

from typing import Optional

from modules.orders.constants import (
    CANCELLABLE_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import IllegalTransition, OrderValidationError


class OrderStateMachine:
    """Validates requested status transitions.

    ::

        pending    -> confirmed | cancelled
        confirmed  -> processing | cancelled
        processing -> shipped
        shipped    -> delivered
    """

    def allowed_transitions(self, current: str) -> frozenset[str]:
        return VALID_TRANSITIONS.get(current, frozenset())

    def is_terminal(self, status: str) -> bool:
        return status in TERMINAL_STATES

    def can_cancel(self, status: str) -> bool:
        return status in CANCELLABLE_STATES

    def validate(
        self,
        current: str,
        requested: str,
        tracking_number: Optional[str] = None,
    ) -> None:
        """Raise unless *current* may move to *requested*.

        Raises:
            OrderValidationError: *requested* is not a known status, or the
                order is being shipped without a tracking number.
            IllegalTransition: *requested* is not reachable from *current*.
        """
        if requested not in OrderStatus.values:
            raise OrderValidationError(f"Unknown order status: {requested!r}.")
        if requested not in self.allowed_transitions(current):
            raise IllegalTransition(current, requested)
        if requested == OrderStatus.SHIPPED and not (tracking_number or "").strip():
            raise OrderValidationError("A tracking number is required to ship an order.")
