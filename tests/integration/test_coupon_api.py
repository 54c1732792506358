"""Integration tests for the coupon API."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.coupons.models import Coupon

pytestmark = pytest.mark.integration


class TestValidate:
    def test_valid_coupon(self, customer_client, make_coupon):
        make_coupon("SAVE20", max_discount=Decimal("150"))
        response = customer_client.post(
            "/api/v1/coupons/validate/", {"code": "save20", "subtotal": "1000.00"}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["coupon"]["code"] == "SAVE20"
        assert Decimal(data["coupon"]["discount_amount"]) == Decimal("150.00")

    def test_below_minimum_reports_shortfall_and_alternatives(
        self, customer_client, make_coupon
    ):
        make_coupon("BIG", min_order_value=Decimal("2000"))
        make_coupon("TEN", discount_value=Decimal("10"))
        make_coupon("FIFTEEN", discount_value=Decimal("15"))

        response = customer_client.post(
            "/api/v1/coupons/validate/", {"code": "BIG", "subtotal": "1500.00"}, format="json"
        )

        assert response.status_code == 400
        data = response.json()
        assert data["valid"] is False
        assert data["code"] == "below_minimum"
        assert data["shortfall"] == "500.00"
        assert [c["code"] for c in data["alternatives"]] == ["FIFTEEN", "TEN"]

    def test_expired(self, customer_client, make_coupon):
        make_coupon(
            "OLD",
            valid_from=timezone.now() - timedelta(days=10),
            valid_until=timezone.now() - timedelta(days=1),
        )
        response = customer_client.post(
            "/api/v1/coupons/validate/", {"code": "OLD", "subtotal": "100"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["code"] == "expired"
        assert "valid_until" in response.json()

    def test_alternatives_capped_at_three(self, customer_client, make_coupon):
        for i in range(5):
            make_coupon(f"C{i}", discount_value=Decimal(10 + i))

        response = customer_client.post(
            "/api/v1/coupons/validate/", {"code": "NOPE", "subtotal": "1000"}, format="json"
        )
        assert [c["code"] for c in response.json()["alternatives"]] == ["C4", "C3", "C2"]


class TestEligible:
    def test_eligible_for_subtotal(self, customer_client, make_coupon):
        make_coupon("SMALL", discount_value=Decimal("5"))
        make_coupon("BIG", min_order_value=Decimal("10000"))

        response = customer_client.get("/api/v1/coupons/eligible/?subtotal=500")
        assert response.status_code == 200
        assert [c["code"] for c in response.json()["results"]] == ["SMALL"]

    def test_subtotal_required(self, customer_client):
        assert customer_client.get("/api/v1/coupons/eligible/").status_code == 400


class TestAdmin:
    def _payload(self, **overrides):
        now = timezone.now()
        data = {
            "code": "diwali25",
            "discount_type": "percentage",
            "discount_value": "25.00",
            "valid_from": now.isoformat(),
            "valid_until": (now + timedelta(days=7)).isoformat(),
            "usage_limit": 100,
        }
        data.update(overrides)
        return data

    def test_create(self, admin_client):
        response = admin_client.post("/api/v1/coupons/", self._payload(), format="json")

        assert response.status_code == 201
        assert response.json()["code"] == "DIWALI25"
        assert Coupon.objects.filter(code="DIWALI25").exists()

    def test_duplicate_is_409(self, admin_client, make_coupon):
        make_coupon("DIWALI25")
        response = admin_client.post("/api/v1/coupons/", self._payload(), format="json")
        assert response.status_code == 409

    def test_percentage_over_100_rejected(self, admin_client):
        response = admin_client.post(
            "/api/v1/coupons/", self._payload(discount_value="120"), format="json"
        )
        assert response.status_code == 400

    def test_inverted_window_rejected(self, admin_client):
        now = timezone.now()
        response = admin_client.post(
            "/api/v1/coupons/",
            self._payload(
                valid_from=now.isoformat(),
                valid_until=(now - timedelta(days=1)).isoformat(),
            ),
            format="json",
        )
        assert response.status_code == 400

    def test_customer_cannot_create(self, customer_client):
        response = customer_client.post("/api/v1/coupons/", self._payload(), format="json")
        assert response.status_code == 403

    def test_deactivate(self, admin_client, make_coupon):
        make_coupon("SAVE20")
        response = admin_client.post("/api/v1/coupons/save20/deactivate/")

        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_list(self, admin_client, make_coupon):
        make_coupon("A1")
        make_coupon("B2")
        assert admin_client.get("/api/v1/coupons/").json()["count"] == 2

    def test_patch_updates_coupon(self, admin_client, make_coupon):
        make_coupon("SAVE20", usage_limit=50, usage_count=7)
        response = admin_client.patch(
            "/api/v1/coupons/save20/",
            {"discount_value": "30.00", "usage_limit": 80},
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["discount_value"] == "30.00"
        assert data["usage_limit"] == 80
        assert data["usage_count"] == 7

    def test_patch_ignores_usage_count(self, admin_client, make_coupon):
        make_coupon("SAVE20", usage_count=3)
        response = admin_client.patch(
            "/api/v1/coupons/SAVE20/", {"usage_count": 0, "is_active": False}, format="json"
        )

        assert response.status_code == 200
        stored = Coupon.objects.get(code="SAVE20")
        assert stored.usage_count == 3
        assert stored.is_active is False

    def test_patch_percentage_over_100_rejected(self, admin_client, make_coupon):
        make_coupon("SAVE20")
        response = admin_client.patch(
            "/api/v1/coupons/SAVE20/", {"discount_value": "120"}, format="json"
        )
        assert response.status_code == 400
        assert "discount_value" in response.json()["detail"]

    def test_patch_inverted_window_rejected(self, admin_client, make_coupon):
        coupon = make_coupon("SAVE20")
        response = admin_client.patch(
            "/api/v1/coupons/SAVE20/",
            {"valid_until": (coupon.valid_from - timedelta(days=1)).isoformat()},
            format="json",
        )
        assert response.status_code == 400

    def test_patch_unknown_is_404(self, admin_client):
        response = admin_client.patch(
            "/api/v1/coupons/GHOST/", {"is_active": False}, format="json"
        )
        assert response.status_code == 404

    def test_customer_cannot_patch(self, customer_client, make_coupon):
        make_coupon("SAVE20")
        response = customer_client.patch(
            "/api/v1/coupons/SAVE20/", {"discount_value": "90"}, format="json"
        )
        assert response.status_code == 403
        assert Coupon.objects.get(code="SAVE20").discount_value == Decimal("20")
