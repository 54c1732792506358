"""Product repository interface (read side used by checkout)."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product, ProductVariant


class IProductRepository(IRepository["Product"]):
    """Repository contract for the catalog."""

    @abstractmethod
    def get_variant(self, product_id: str, variant_id: str) -> Optional[ProductVariant]:
        """Retrieve an active variant that belongs to *product_id*."""
