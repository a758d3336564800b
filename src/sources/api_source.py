# src/sources/api_source.py

"""Remote product source for the storefront's HTTP product API."""

import asyncio
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.filters.product_filter import ProductFilter
from src.filters.product_validator import ProductValidator
from src.models.errors import SourceError
from src.models.filter_state import ALL, FilterConfiguration, SortOption
from src.models.product import Product
from src.sources.base_source import RemoteProductSource, SourceResult


class ApiProductSource(RemoteProductSource):
    """``GET /products`` with query-string filters, ``POST /products/batch``.

    The API only knows ``price_asc``, ``rating_desc`` and
    ``shipping_asc`` and does not sort stably, so ordering is re-done
    locally on the returned page.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: Any | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__("api")
        self.base_url = (base_url or Settings.PRODUCT_API_URL).rstrip("/")
        self.session = session or curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self._timeout = timeout or Settings.FETCH_TIMEOUT

    @staticmethod
    def build_params(filters: FilterConfiguration) -> dict[str, str]:
        """Translate *filters* into the API's query-string parameters."""
        params: dict[str, str] = {}
        query = filters.query.strip()
        if query:
            params["q"] = query
        if filters.min_price is not None:
            params["minPrice"] = str(filters.min_price)
        if filters.max_price is not None:
            params["maxPrice"] = str(filters.max_price)
        params["sources"] = ",".join(
            m.value for m in filters.enabled_marketplaces()
        )
        params["sort"] = SortOption(filters.sort_by).value
        condition = filters.condition.strip().lower()
        if condition != ALL:
            params["condition"] = condition
        category = filters.category.strip()
        if category and category.lower() != ALL:
            params["category"] = category
        return params

    def _parse_products(self, payload: Any) -> list[Product]:
        if not isinstance(payload, list):
            raise SourceError("Product API returned a non-list payload")
        products: list[Product] = []
        for row in payload:
            try:
                products.append(Product.from_dict(row))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                self.logger.warning("Skipping malformed product: %s", exc)
        valid, _ = ProductValidator.validate(products)
        return valid

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        resp = self.session.request(
            method, url, timeout=self._timeout, **kwargs
        )
        if resp.status_code != 200:
            raise SourceError(
                f"{method} {path} failed with status: {resp.status_code}"
            )
        return resp.json()

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(
                self._request, method, path, **kwargs
            )
        except SourceError:
            raise
        except Exception as exc:
            raise SourceError(f"{method} {path} failed: {exc}") from exc

    async def query(self, filters: FilterConfiguration) -> SourceResult:
        if not filters.enabled_marketplaces():
            return SourceResult()
        payload = await self._call(
            "GET", "/products", params=self.build_params(filters)
        )
        products = ProductFilter.sort_products(
            self._parse_products(payload), filters.sort_by
        )
        self.logger.info(
            "Fetched %d products for query '%s'",
            len(products),
            filters.query,
        )
        return SourceResult(products=products, total=len(products))

    async def get_products_by_ids(self, ids: list[str]) -> list[Product]:
        """Hydrate a list of product ids (e.g. favorites)."""
        if not ids:
            return []
        payload = await self._call(
            "POST", "/products/batch", json={"ids": ids}
        )
        return self._parse_products(payload)

    async def get_product(self, product_id: str) -> Product | None:
        products = await self.get_products_by_ids([product_id])
        return products[0] if products else None

    async def categories(self) -> list[str]:
        payload = await self._call("GET", "/products")
        return sorted(
            {p.category for p in self._parse_products(payload) if p.category}
        )
