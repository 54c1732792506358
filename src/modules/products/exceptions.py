"""Catalog exceptions raised while pricing checkout items."""

from __future__ import annotations


class ProductNotFound(Exception):
    """The requested product does not exist."""


class InactiveProduct(Exception):
    """The product exists but is not currently sellable."""


class VariantNotFound(Exception):
    """The variant does not exist, is inactive or belongs to another product."""
