"""Order domain exceptions.

Raised by the service layer when business rules are violated.  Each
carries a machine-readable ``code`` that the API layer returns next to
the human-readable ``detail``.
"""

from __future__ import annotations

from decimal import Decimal


class OrderError(Exception):
    code = "order_error"


class OrderNotFound(OrderError):
    """The requested order does not exist."""

    code = "not_found"


class OrderValidationError(OrderError):
    """The request is malformed for the order's current state.

    Examples: an unknown status value, or shipping without a tracking
    number.  Nothing is mutated.
    """

    code = "validation_error"


class IllegalTransition(OrderError):
    """The requested status is not reachable from the current status."""

    code = "illegal_transition"

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}.")


class VersionConflict(OrderError):
    """The order changed since the caller last read it.

    ``current_version`` is the version persisted now; the caller must
    reload the order before retrying.
    """

    code = "conflict"

    def __init__(self, current_version: int) -> None:
        self.current_version = current_version
        super().__init__(
            f"Order was modified concurrently; current version is {current_version}."
        )


class PaymentFailed(OrderError):
    """The payment backing an order did not succeed; no order is created."""

    code = "payment_failed"


class PricingMismatch(OrderError):
    """Client-side and server-side totals disagree."""

    code = "pricing_mismatch"

    def __init__(self, field: str, expected: Decimal, actual: Decimal) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"{field} mismatch: client sent {expected}, server computed {actual}.")


class PersistenceError(Exception):
    """The storage layer failed while writing an order.

    Not an ``OrderError``: views let it propagate as a server error.
    """

    code = "persistence_error"


class DuplicateIdempotencyKey(PersistenceError):
    """Another request already stored an order under this idempotency key."""

    code = "duplicate_idempotency_key"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"An order with idempotency key {key!r} already exists.")
