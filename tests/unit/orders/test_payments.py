"""Unit tests for gateway signature verification (no database)."""

from __future__ import annotations

import hashlib
import hmac

import pytest

from modules.orders.constants import PaymentMethod
from modules.orders.dtos import PaymentConfirmationDTO
from modules.orders.payments import RazorpaySignatureVerifier, default_payment_verifier

pytestmark = pytest.mark.unit

SECRET = "unit-secret"


def _sign(gateway_order_id: str, payment_id: str, secret: str = SECRET) -> str:
    message = f"{gateway_order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def _payment(**overrides) -> PaymentConfirmationDTO:
    data = {
        "payment_id": "pay_1",
        "gateway_order_id": "order_1",
        "signature": _sign("order_1", "pay_1"),
    }
    data.update(overrides)
    return PaymentConfirmationDTO(**data)


class TestRazorpaySignatureVerifier:
    def test_valid_signature(self):
        assert RazorpaySignatureVerifier(SECRET).verify(_payment()) is True

    def test_tampered_signature(self):
        signature = _sign("order_1", "pay_1")
        tampered = ("1" if signature[0] != "1" else "2") + signature[1:]
        assert RazorpaySignatureVerifier(SECRET).verify(_payment(signature=tampered)) is False

    def test_signed_with_another_secret(self):
        payment = _payment(signature=_sign("order_1", "pay_1", secret="other"))
        assert RazorpaySignatureVerifier(SECRET).verify(payment) is False

    def test_swapped_gateway_order(self):
        assert RazorpaySignatureVerifier(SECRET).verify(_payment(gateway_order_id="order_2")) is False

    @pytest.mark.parametrize("missing", ["payment_id", "gateway_order_id", "signature"])
    def test_missing_field(self, missing):
        assert RazorpaySignatureVerifier(SECRET).verify(_payment(**{missing: ""})) is False

    def test_unconfigured_secret_rejects_everything(self):
        assert RazorpaySignatureVerifier("").verify(_payment()) is False


class TestPaymentConfirmation:
    def test_online_requires_verification(self):
        assert PaymentConfirmationDTO().requires_verification is True

    def test_cod_skips_verification(self):
        assert PaymentConfirmationDTO(method=PaymentMethod.COD).requires_verification is False


def test_default_verifier_uses_configured_secret(settings):
    settings.RAZORPAY_KEY_SECRET = SECRET
    assert default_payment_verifier().verify(_payment()) is True
