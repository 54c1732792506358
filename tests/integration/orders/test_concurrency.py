"""Order status concurrency integration test.

Proves that the conditional ``UPDATE ... WHERE version = %s`` lets exactly
one of several admins holding the same version win.

Scenario:
- A confirmed order at **version = 1**.
- 8 threads request ``processing`` with ``expected_version = 1``.
- Exactly 1 succeeds, 7 raise ``VersionConflict``.
- Final version is 2 and exactly one history entry was appended.

Uses ``TransactionTestCase`` so each thread sees committed data.  SQLite
serialises writers on a single file lock, so the test only runs against a
server database.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import unittest
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

import django
from django.conf import settings
from django.db import connection
from django.test import TransactionTestCase

from modules.checkout.dtos import CheckoutLine
from modules.checkout.services import CatalogPricer
from modules.checkout.sessions import build_session
from modules.delivery.models import DeliverySettings
from modules.orders.constants import OrderStatus
from modules.orders.dtos import PaymentConfirmationDTO, ShippingAddressDTO, StatusUpdateRequest
from modules.orders.exceptions import VersionConflict
from modules.orders.models import Order
from modules.orders.services import default_order_service
from modules.products.models import Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = logging.getLogger(__name__)

NUM_WORKERS = 8


@unittest.skipIf(connection.vendor == "sqlite", "needs a database with row-level locking")
class TestStatusUpdateConcurrency(TransactionTestCase):
    """Prove a single winner per version under concurrent status updates."""

    def setUp(self):
        product = Product.objects.create(
            sku="RING-RACE",
            name="Race Ring",
            base_price=Decimal("1000.00"),
            status=ProductStatus.ACTIVE,
        )
        DeliverySettings.objects.create(
            business_pincode="400001",
            business_city="Mumbai",
            business_state="Maharashtra",
            national_delivery_charge=Decimal("250.00"),
        )
        pricer = CatalogPricer(ProductDjangoRepository())
        session = build_session(pricer.price_lines([CheckoutLine(product_id=str(product.id))]))
        self.order = default_order_service().create_from_session(
            session,
            ShippingAddressDTO(
                name="Race Tester",
                phone="9876543210",
                street="1 Test Street",
                city="Bengaluru",
                state="Karnataka",
                pincode="560001",
            ),
            PaymentConfirmationDTO(
                payment_id="pay_race",
                gateway_order_id="order_race",
                signature=hmac.new(
                    settings.RAZORPAY_KEY_SECRET.encode("utf-8"),
                    b"order_race|pay_race",
                    hashlib.sha256,
                ).hexdigest(),
            ),
        )

    def _update_in_thread(self, thread_id: int) -> str:
        django.db.connections.close_all()
        try:
            default_order_service().update_status(
                StatusUpdateRequest(
                    order_id=self.order.id,
                    new_status=OrderStatus.PROCESSING,
                    expected_version=1,
                    updated_by=f"admin-{thread_id}",
                )
            )
            return "success"
        except VersionConflict:
            logger.warning("Thread %d: VersionConflict (expected)", thread_id)
            return "conflict"

    def test_single_winner(self):
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            futures = [pool.submit(self._update_in_thread, i) for i in range(NUM_WORKERS)]
            results = [future.result() for future in as_completed(futures)]

        self.assertEqual(results.count("success"), 1)
        self.assertEqual(results.count("conflict"), NUM_WORKERS - 1)

        order = Order.objects.get(id=self.order.id)
        self.assertEqual(order.version, 2)
        self.assertEqual(order.status, OrderStatus.PROCESSING)
        self.assertEqual(order.status_history.count(), 2)
