# src/sources/supabase_source.py

"""Remote product source backed by the Supabase ``products`` table."""

import asyncio
from datetime import date
from typing import Any

from supabase import Client

from src.config.settings import Settings
from src.filters.product_filter import ProductFilter
from src.filters.product_validator import ProductValidator
from src.models.errors import SourceError
from src.models.filter_state import ALL, FilterConfiguration, SortOption
from src.models.product import (
    Condition,
    Marketplace,
    PricePoint,
    Product,
)
from src.sources.base_source import RemoteProductSource, SourceResult
from src.storage.supabase_client import get_supabase

# (column, descending) per sort key; NEWEST has no usable column
_ORDERING: dict[SortOption, tuple[str, bool] | None] = {
    SortOption.PRICE_ASC: ("price", False),
    SortOption.PRICE_DESC: ("price", True),
    SortOption.RATING_DESC: ("rating", True),
    SortOption.SHIPPING_ASC: ("shipping_estimate", False),
    SortOption.NEWEST: None,
}


def escape_like(text: str) -> str:
    """Make ``%``, ``_`` and ``\\`` match literally in a LIKE pattern."""
    return (
        text.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


def quote_filter_value(value: str) -> str:
    """Double-quote a value inside a PostgREST ``or=(...)`` tree."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def product_from_row(
    row: dict[str, Any],
    price_history: list[PricePoint] | None = None,
) -> Product:
    """Map a snake_case ``products`` row to a :class:`Product`."""
    original = row.get("original_price")
    return Product(
        id=str(row["id"]),
        marketplace=Marketplace.parse(row["marketplace"]),
        title=str(row["title"]),
        price=float(row["price"]),
        currency=str(row.get("currency") or Settings.DEFAULT_CURRENCY),
        rating=float(row.get("rating") or 0.0),
        rating_count=int(row.get("rating_count") or 0),
        condition=Condition.parse(row.get("condition") or "new"),
        category=str(row.get("category") or ""),
        shipping_estimate=str(row.get("shipping_estimate") or ""),
        description=row.get("description") or None,
        original_price=float(original) if original is not None else None,
        image_url=str(row.get("image_url") or ""),
        product_url=str(row.get("product_url") or ""),
        ships_to=tuple(row.get("ships_to") or ()),
        price_history=tuple(price_history or ()),
    )


class SupabaseProductSource(RemoteProductSource):
    """Translate filter configurations into PostgREST queries."""

    PRODUCTS_TABLE = "products"
    HISTORY_TABLE = "price_history"

    def __init__(
        self,
        client: Client | None = None,
        page_size: int | None = None,
    ) -> None:
        super().__init__("supabase")
        self._client = client
        self._page_size = page_size or Settings.REMOTE_PAGE_SIZE

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    # ── Filter translation ───────────────────────────────

    def build_query(self, filters: FilterConfiguration) -> Any:
        """Return the PostgREST request builder for *filters*."""
        builder: Any = self.client.table(self.PRODUCTS_TABLE).select(
            "*", count="exact"
        )

        needle = filters.query.strip()
        if needle:
            pattern = quote_filter_value(f"%{escape_like(needle)}%")
            builder = builder.or_(
                f"title.ilike.{pattern},"
                f"description.ilike.{pattern},"
                f"category.ilike.{pattern}"
            )

        enabled = filters.enabled_marketplaces()
        if len(enabled) < len(Marketplace):
            builder = builder.in_(
                "marketplace", [m.value for m in enabled]
            )

        condition = filters.condition.strip().lower()
        if condition != ALL:
            builder = builder.eq("condition", condition)

        category = filters.category.strip()
        if category and category.lower() != ALL:
            # no wildcards: case-insensitive equality
            builder = builder.ilike("category", escape_like(category))

        if filters.min_price is not None:
            builder = builder.gte("price", filters.min_price)
        if filters.max_price is not None:
            builder = builder.lte("price", filters.max_price)

        ordering = _ORDERING[SortOption(filters.sort_by)]
        if ordering is not None:
            column, desc = ordering
            builder = builder.order(column, desc=desc, nullsfirst=False)
        # stable pages: equal keys never straddle a range boundary
        builder = builder.order("id")

        return builder.range(0, self._page_size - 1)

    def _query_sync(self, filters: FilterConfiguration) -> SourceResult:
        resp: Any = self.build_query(filters).execute()
        rows: list[dict[str, Any]] = resp.data or []
        products: list[Product] = []
        for row in rows:
            try:
                products.append(product_from_row(row))
            except (KeyError, TypeError, ValueError) as exc:
                self.logger.warning(
                    "Skipping malformed product row %s: %s",
                    row.get("id"),
                    exc,
                )
        products, dropped = ProductValidator.validate(products)
        # NULL ratings arrive as 0.0 and shipping follows the db collation
        products = ProductFilter.sort_products(products, filters.sort_by)
        total = resp.count if resp.count is not None else len(products)
        return SourceResult(products=products, total=total - dropped)

    async def query(self, filters: FilterConfiguration) -> SourceResult:
        if not filters.enabled_marketplaces():
            return SourceResult()
        try:
            result = await asyncio.to_thread(self._query_sync, filters)
        except Exception as exc:
            raise SourceError(f"Failed to fetch products: {exc}") from exc
        self.logger.info(
            "Fetched %d of %d products for query '%s'",
            len(result.products),
            result.total,
            filters.query,
        )
        return result

    # ── Single product / categories ──────────────────────

    def _get_product_sync(self, product_id: str) -> Product | None:
        resp: Any = (
            self.client.table(self.PRODUCTS_TABLE)
            .select("*")
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
        rows: list[dict[str, Any]] = resp.data or []
        if not rows:
            return None

        history_resp: Any = (
            self.client.table(self.HISTORY_TABLE)
            .select("date, price")
            .eq("product_id", product_id)
            .order("date")
            .execute()
        )
        history = [
            PricePoint(
                date=date.fromisoformat(str(h["date"])[:10]),
                price=float(h["price"]),
            )
            for h in history_resp.data or []
        ]
        return product_from_row(rows[0], history)

    async def get_product(self, product_id: str) -> Product | None:
        try:
            return await asyncio.to_thread(
                self._get_product_sync, product_id
            )
        except Exception as exc:
            raise SourceError(
                f"Failed to fetch product {product_id}: {exc}"
            ) from exc

    def _categories_sync(self) -> list[str]:
        resp: Any = (
            self.client.table(self.PRODUCTS_TABLE)
            .select("category")
            .order("category")
            .execute()
        )
        return sorted(
            {str(r["category"]) for r in resp.data or [] if r.get("category")}
        )

    async def categories(self) -> list[str]:
        try:
            return await asyncio.to_thread(self._categories_sync)
        except Exception as exc:
            raise SourceError(
                f"Failed to fetch categories: {exc}"
            ) from exc
