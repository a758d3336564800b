# src/sources/base_source.py

"""Abstract product sources consumed by the query coordinator."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.models.filter_state import FilterConfiguration
from src.models.product import Product


@dataclass
class SourceResult:
    """Products returned by a remote query plus the matching total."""

    products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    total: int = 0


class LocalProductSource(ABC):
    """An in-memory table.  The coordinator filters it with ProductFilter."""

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(f"pricefind.sources.{source_name}")

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product, unfiltered, in table order."""

    def get_product(self, product_id: str) -> Product | None:
        for product in self.list_all():
            if product.id == product_id:
                return product
        return None

    def categories(self) -> list[str]:
        """Distinct category labels, sorted."""
        return sorted({p.category for p in self.list_all() if p.category})


class RemoteProductSource(ABC):
    """A query service.  Filters are translated at this boundary."""

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(f"pricefind.sources.{source_name}")

    @abstractmethod
    async def query(self, filters: FilterConfiguration) -> SourceResult:
        """Return products matching *filters*, already ordered.

        Raises:
            SourceError: when the service is unreachable or misbehaves.
        """

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Fetch one product (with its price history) by id."""

    @abstractmethod
    async def categories(self) -> list[str]:
        """Distinct category labels, sorted."""


ProductSource = LocalProductSource | RemoteProductSource
