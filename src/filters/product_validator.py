# src/filters/product_validator.py

"""Product validation, applied to source data before it reaches the core."""

import dataclasses
import logging

from src.models.product import Product

logger = logging.getLogger("pricefind.filters")


class ProductValidator:
    """Drop products that break the data model's invariants."""

    @staticmethod
    def validate(
        products: list[Product],
    ) -> tuple[list[Product], int]:
        """Drop products with blank titles, negative prices or bad ratings.

        Price history that arrives out of date order is re-sorted rather
        than rejected.  Returns the valid products and the dropped count.
        """
        valid: list[Product] = []
        dropped = 0

        for product in products:
            if not product.title.strip():
                logger.debug(
                    "Dropped product with empty title (id=%s)",
                    product.id,
                )
                dropped += 1
                continue
            if product.price < 0:
                logger.debug(
                    "Dropped product with negative price "
                    "(id=%s, price=%s)",
                    product.id,
                    product.price,
                )
                dropped += 1
                continue
            if not 0 <= product.rating <= 5:
                logger.debug(
                    "Dropped product with out-of-range rating "
                    "(id=%s, rating=%s)",
                    product.id,
                    product.rating,
                )
                dropped += 1
                continue

            history = product.price_history
            dates = [p.date for p in history]
            if dates != sorted(dates):
                logger.debug(
                    "Re-ordered price history for product %s",
                    product.id,
                )
                product = dataclasses.replace(
                    product,
                    price_history=tuple(
                        sorted(history, key=lambda p: p.date)
                    ),
                )
            valid.append(product)

        if dropped:
            logger.info(
                "Validation dropped %d invalid products",
                dropped,
            )

        return valid, dropped
