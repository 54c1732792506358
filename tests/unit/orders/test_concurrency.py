"""Unit tests for ``ConcurrencyGuard``.

Covers:
- Successful write bumps the version by exactly one and appends history.
- Stale expected version is rejected before the mutation runs.
- Lost race at the conditional write reports the fresh version.
- Mutation errors leave the order untouched.
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest

from modules.orders.concurrency import ConcurrencyGuard, StatusMutation
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderStatusChanged
from modules.orders.exceptions import OrderNotFound, OrderValidationError, VersionConflict
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


def _to(status: str, **fields):
    return lambda current: StatusMutation(status=status, fields=fields, notes="test")


@pytest.fixture()
def guard():
    return ConcurrencyGuard(OrderDjangoRepository())


class TestApply:
    def test_success_increments_version(self, guard, place_order):
        order = place_order()
        assert order.version == 1

        updated = guard.apply(order.id, 1, _to(OrderStatus.PROCESSING), updated_by="admin")

        assert updated.status == OrderStatus.PROCESSING
        assert updated.version == 2
        history = list(updated.status_history.all())
        assert history[-1].old_status == OrderStatus.CONFIRMED
        assert history[-1].new_status == OrderStatus.PROCESSING
        assert history[-1].updated_by == "admin"

    def test_success_carries_status_changed_event(self, guard, place_order):
        order = place_order()
        updated = guard.apply(order.id, 1, _to(OrderStatus.PROCESSING))

        (event,) = updated.domain_events
        assert isinstance(event, OrderStatusChanged)
        assert event.old_status == OrderStatus.CONFIRMED
        assert event.new_status == OrderStatus.PROCESSING
        assert event.version == 2

    def test_extra_fields_written(self, guard, place_order):
        order = place_order()
        guard.apply(order.id, 1, _to(OrderStatus.PROCESSING, courier_name="BlueDart"))
        assert Order.objects.get(id=order.id).courier_name == "BlueDart"

    def test_version_three_becomes_four(self, guard, place_order):
        order = place_order()
        Order.objects.filter(id=order.id).update(version=3)

        updated = guard.apply(order.id, 3, _to(OrderStatus.PROCESSING))
        assert updated.version == 4

    def test_stale_version_rejected_before_mutation(self, guard, place_order):
        order = place_order()
        calls = []

        def mutation(current):
            calls.append(current)
            return StatusMutation(status=OrderStatus.PROCESSING)

        guard.apply(order.id, 1, _to(OrderStatus.PROCESSING))
        with pytest.raises(VersionConflict) as exc_info:
            guard.apply(order.id, 1, mutation)

        assert exc_info.value.current_version == 2
        assert calls == []
        assert Order.objects.get(id=order.id).version == 2

    def test_mutation_error_leaves_order_untouched(self, guard, place_order):
        order = place_order()

        def invalid(current):
            raise OrderValidationError("nope")

        with pytest.raises(OrderValidationError):
            guard.apply(order.id, 1, invalid)

        stored = Order.objects.get(id=order.id)
        assert stored.version == 1
        assert stored.status == OrderStatus.CONFIRMED
        assert stored.status_history.count() == 1

    def test_unknown_order(self, guard):
        with pytest.raises(OrderNotFound):
            guard.apply(uuid.uuid4(), 1, _to(OrderStatus.PROCESSING))


class _LostRaceRepository:
    """Reads version 3 but the conditional write finds someone else got there."""

    def __init__(self, fresh_version):
        self.order = SimpleNamespace(id=uuid.uuid4(), version=3, status=OrderStatus.CONFIRMED)
        self.fresh_version = fresh_version
        self.history = []

    def get_by_id(self, id):
        return self.order

    def conditional_update_status(self, id, expected_version, fields):
        return 0

    def get_version(self, id):
        return self.fresh_version

    def add_history(self, *args, **kwargs):
        self.history.append((args, kwargs))


class TestLostRace:
    def test_zero_rows_reports_fresh_version(self):
        repo = _LostRaceRepository(fresh_version=4)
        guard = ConcurrencyGuard(repo)

        with pytest.raises(VersionConflict) as exc_info:
            guard.apply(repo.order.id, 3, _to(OrderStatus.PROCESSING))

        assert exc_info.value.current_version == 4
        assert repo.history == []

    def test_zero_rows_and_order_gone(self):
        repo = _LostRaceRepository(fresh_version=None)
        guard = ConcurrencyGuard(repo)

        with pytest.raises(OrderNotFound):
            guard.apply(repo.order.id, 3, _to(OrderStatus.PROCESSING))
