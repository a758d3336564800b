# src/filters/product_filter.py

"""Pure filter + sort pipeline over a product collection."""

import logging
from collections.abc import Sequence

from src.models.filter_state import ALL, FilterConfiguration, SortOption
from src.models.product import Product

logger = logging.getLogger("pricefind.filters")


class ProductFilter:
    """Narrow and order products for a query and filter configuration.

    Stages run in a fixed order, each over the previous stage's output:
    text match, marketplace, condition, category, price bounds, sort.
    Nothing here performs I/O or mutates its input.
    """

    @staticmethod
    def match_query(
        products: Sequence[Product], query: str,
    ) -> list[Product]:
        """Case-insensitive substring match on title/description/category.

        An empty (or whitespace-only) query matches everything.
        """
        needle = query.strip().lower()
        if not needle:
            return list(products)
        return [
            p
            for p in products
            if needle in p.title.lower()
            or needle in (p.description or "").lower()
            or needle in p.category.lower()
        ]

    @staticmethod
    def filter_marketplaces(
        products: Sequence[Product], filters: FilterConfiguration,
    ) -> list[Product]:
        """Drop products from marketplaces whose flag is off."""
        enabled = set(filters.enabled_marketplaces())
        return [p for p in products if p.marketplace in enabled]

    @staticmethod
    def filter_condition(
        products: Sequence[Product], condition: str,
    ) -> list[Product]:
        wanted = condition.strip().lower()
        if wanted == ALL:
            return list(products)
        return [p for p in products if p.condition.value == wanted]

    @staticmethod
    def filter_category(
        products: Sequence[Product], category: str,
    ) -> list[Product]:
        wanted = category.strip().lower()
        if not wanted or wanted == ALL:
            return list(products)
        return [p for p in products if p.category.lower() == wanted]

    @staticmethod
    def filter_price_range(
        products: Sequence[Product],
        min_price: float | None,
        max_price: float | None,
    ) -> list[Product]:
        """Keep products inside the inclusive [min, max] window.

        Each bound is optional.  An inverted window yields nothing.
        """
        return [
            p
            for p in products
            if (min_price is None or p.price >= min_price)
            and (max_price is None or p.price <= max_price)
        ]

    @staticmethod
    def sort_products(
        products: Sequence[Product], sort_by: SortOption | str,
    ) -> list[Product]:
        """Stable sort by the selected key.

        ``shipping_asc`` compares the raw estimate text, so "10 days"
        sorts before "2-3 days".  ``newest`` keeps input order.
        """
        key = SortOption(sort_by)
        if key is SortOption.PRICE_ASC:
            return sorted(products, key=lambda p: p.price)
        if key is SortOption.PRICE_DESC:
            return sorted(products, key=lambda p: p.price, reverse=True)
        if key is SortOption.RATING_DESC:
            return sorted(products, key=lambda p: p.rating, reverse=True)
        if key is SortOption.SHIPPING_ASC:
            return sorted(products, key=lambda p: p.shipping_estimate)
        return list(products)

    @staticmethod
    def apply(
        products: Sequence[Product],
        query: str,
        filters: FilterConfiguration,
    ) -> list[Product]:
        """Run the full pipeline and return a new ordered list."""
        if not products:
            return []

        result = ProductFilter.match_query(products, query)
        result = ProductFilter.filter_marketplaces(result, filters)
        result = ProductFilter.filter_condition(result, filters.condition)
        result = ProductFilter.filter_category(result, filters.category)
        result = ProductFilter.filter_price_range(
            result, filters.min_price, filters.max_price
        )
        result = ProductFilter.sort_products(result, filters.sort_by)

        excluded = len(products) - len(result)
        if excluded:
            logger.debug(
                "Filtered out %d of %d products for query '%s'",
                excluded,
                len(products),
                query,
            )
        return result
