"""Payment gateway verification.

An online order is only created once the gateway's signature over
``<gateway_order_id>|<payment_id>`` checks out against the shared secret
(HMAC-SHA256, hex digest), which is how Razorpay signs checkout results.
"""

from __future__ import annotations

import hashlib
import hmac
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from modules.orders.dtos import PaymentConfirmationDTO

logger = structlog.get_logger(__name__)


class IPaymentVerifier(ABC):
    @abstractmethod
    def verify(self, payment: PaymentConfirmationDTO) -> bool:
        """Return ``True`` only when the gateway vouches for *payment*."""


class RazorpaySignatureVerifier(IPaymentVerifier):
    def __init__(self, key_secret: str) -> None:
        self._key_secret = key_secret

    def verify(self, payment: PaymentConfirmationDTO) -> bool:
        if not self._key_secret:
            logger.error("payment.verifier_not_configured")
            return False
        if not (payment.payment_id and payment.gateway_order_id and payment.signature):
            return False

        message = f"{payment.gateway_order_id}|{payment.payment_id}".encode("utf-8")
        expected = hmac.new(
            self._key_secret.encode("utf-8"), message, hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(payment.signature, expected)


def default_payment_verifier() -> IPaymentVerifier:
    from django.conf import settings

    return RazorpaySignatureVerifier(settings.RAZORPAY_KEY_SECRET)
