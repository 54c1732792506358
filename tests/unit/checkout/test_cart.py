"""Unit tests for the in-memory ``Cart`` (no database)."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.checkout.cart import Cart
from modules.checkout.dtos import CheckoutItem

pytestmark = pytest.mark.unit


def _item(product_id="p1", variant_id=None, price="1000.00", quantity=1):
    return CheckoutItem(
        product_id=product_id,
        variant_id=variant_id,
        product_name=f"Product {product_id}",
        unit_price=Decimal(price),
        quantity=quantity,
    )


class TestItems:
    def test_add_merges_same_line(self):
        cart = Cart()
        cart.add(_item(quantity=1))
        cart.add(_item(quantity=2))
        assert len(cart) == 1
        assert cart.item_count == 3

    def test_variants_are_separate_lines(self):
        cart = Cart()
        cart.add(_item(variant_id="v1"))
        cart.add(_item(variant_id="v2"))
        cart.add(_item())
        assert len(cart) == 3

    def test_update_quantity(self):
        cart = Cart()
        cart.add(_item())
        cart.update_quantity("p1", 4)
        assert cart.item_count == 4

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_quantity_to_zero_removes(self, quantity):
        cart = Cart()
        cart.add(_item())
        cart.update_quantity("p1", quantity)
        assert len(cart) == 0

    def test_update_unknown_line_is_noop(self):
        cart = Cart()
        cart.update_quantity("missing", 3)
        assert len(cart) == 0

    def test_remove(self):
        cart = Cart()
        cart.add(_item(variant_id="v1"))
        cart.remove("p1", "v1")
        assert len(cart) == 0

    def test_subtotal(self):
        cart = Cart()
        cart.add(_item("p1", price="1000.00", quantity=2))
        cart.add(_item("p2", price="600.50"))
        assert cart.subtotal == Decimal("2600.50")

    def test_empty_subtotal(self):
        assert Cart().subtotal == Decimal("0.00")

    def test_clear_drops_items_and_coupon(self):
        cart = Cart()
        cart.add(_item())
        cart.apply_coupon("save20")
        cart.clear()
        assert len(cart) == 0
        assert cart.coupon_code is None


class TestCoupon:
    def test_apply_normalizes_code(self):
        cart = Cart()
        cart.apply_coupon("  save20 ")
        assert cart.coupon_code == "SAVE20"

    def test_blank_code_clears(self):
        cart = Cart()
        cart.apply_coupon("SAVE20")
        cart.apply_coupon("   ")
        assert cart.coupon_code is None

    def test_remove_coupon(self):
        cart = Cart()
        cart.apply_coupon("SAVE20")
        cart.remove_coupon()
        assert cart.coupon_code is None


class TestSnapshot:
    def test_snapshot_is_detached_from_cart(self):
        cart = Cart()
        cart.add(_item(quantity=1))
        snapshot = cart.snapshot()

        cart.update_quantity("p1", 5)
        cart.add(_item("p2"))

        assert len(snapshot) == 1
        assert snapshot[0].quantity == 1

    def test_snapshot_keeps_insertion_order(self):
        cart = Cart()
        cart.add(_item("b"))
        cart.add(_item("a"))
        assert [i.product_id for i in cart.snapshot()] == ["b", "a"]
