"""Pricing constants."""

from decimal import ROUND_HALF_UP, Decimal

CURRENCY = "INR"
CURRENCY_QUANTUM = Decimal("0.01")
ROUNDING = ROUND_HALF_UP

DEFAULT_TAX_RATE = Decimal("0.10")
ZERO = Decimal("0.00")
