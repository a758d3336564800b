# src/sources/catalog_source.py

"""Local product table loaded from the bundled JSON catalog."""

import json
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.filters.product_validator import ProductValidator
from src.models.errors import SourceError
from src.models.product import Product
from src.sources.base_source import LocalProductSource


class CatalogSource(LocalProductSource):
    """In-memory product table.

    Built either from an explicit product list or lazily from a JSON
    file of camelCase product records (``Settings.CATALOG_PATH``).
    """

    def __init__(
        self,
        products: list[Product] | None = None,
        catalog_path: Path | None = None,
    ) -> None:
        super().__init__("catalog")
        self._catalog_path = catalog_path or Settings.CATALOG_PATH
        self._products: list[Product] | None = (
            list(products) if products is not None else None
        )

    def _load(self) -> list[Product]:
        try:
            with open(self._catalog_path, encoding="utf-8") as f:
                raw: Any = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            raise SourceError(
                f"Failed to read catalog {self._catalog_path}: {exc}"
            ) from exc

        if not isinstance(raw, list):
            raise SourceError(
                f"Catalog {self._catalog_path} is not a list of products"
            )

        products: list[Product] = []
        for idx, row in enumerate(raw):
            try:
                products.append(Product.from_dict(row))
            except (KeyError, TypeError, ValueError) as exc:
                self.logger.warning(
                    "Skipping malformed catalog row %d: %s", idx, exc,
                )

        products, _ = ProductValidator.validate(products)
        self.logger.info(
            "Loaded %d products from %s",
            len(products),
            self._catalog_path,
        )
        return products

    def list_all(self) -> list[Product]:
        if self._products is None:
            self._products = self._load()
        return list(self._products)
