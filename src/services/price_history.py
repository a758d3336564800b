# src/services/price_history.py

"""Fixed-length recent price windows, trends and summary statistics."""

import logging
import random
from datetime import date, timedelta
from enum import Enum

from src.config.settings import Settings
from src.models.price_history import PriceHistorySeries, PriceStats
from src.models.product import PricePoint, Product

logger = logging.getLogger("pricefind.price_history")


class Trend(str, Enum):
    DOWN = "down"
    UP = "up"
    FLAT = "flat"


class PriceHistoryNormalizer:
    """Build the short price series shown next to each product.

    Products with at least ``min_points`` real samples get their most
    recent ``window`` samples, with the last one pinned to the current
    price.  Anything shorter gets a synthetic series flagged
    ``synthesized=True``: ``window - 1`` daily samples within
    +/- ``variation`` of the current price, then the current price.
    """

    def __init__(
        self,
        window: int | None = None,
        min_points: int | None = None,
        variation: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.window = window or Settings.PRICE_HISTORY_WINDOW
        self.min_points = min_points or Settings.PRICE_HISTORY_MIN_POINTS
        self.variation = (
            variation
            if variation is not None
            else Settings.SYNTHETIC_VARIATION
        )
        if self.window < self.min_points:
            raise ValueError("window must be >= min_points")
        self._rng = rng or random.Random()

    def recent_window(
        self, product: Product, today: date | None = None,
    ) -> PriceHistorySeries:
        """Return the display window for *product*, most recent last."""
        today = today or date.today()
        history = list(product.price_history)

        if len(history) < self.min_points:
            return self._synthesize(product, today)

        last = history[-1]
        if last.price != product.price:
            if last.date < today:
                history.append(PricePoint(today, product.price))
            else:
                history[-1] = PricePoint(last.date, product.price)

        return PriceHistorySeries(
            product_id=product.id,
            points=tuple(history[-self.window:]),
        )

    def _synthesize(
        self, product: Product, today: date,
    ) -> PriceHistorySeries:
        current = product.price
        low, high = 1 - self.variation, 1 + self.variation
        points = [
            PricePoint(
                date=today - timedelta(days=self.window - 1 - i),
                price=round(current * self._rng.uniform(low, high), 2),
            )
            for i in range(self.window - 1)
        ]
        points.append(PricePoint(today, current))
        logger.debug(
            "Synthesized %d-point history for product %s",
            len(points),
            product.id,
        )
        return PriceHistorySeries(
            product_id=product.id,
            points=tuple(points),
            synthesized=True,
        )

    # ── Derived values ───────────────────────────────────

    @staticmethod
    def trend(series: PriceHistorySeries) -> Trend:
        """Compare the window's first sample to its current price."""
        first, current = series.first.price, series.latest.price
        if current < first:
            return Trend.DOWN
        if current > first:
            return Trend.UP
        return Trend.FLAT

    @staticmethod
    def is_trending_down(series: PriceHistorySeries) -> bool:
        return series.latest.price < series.first.price

    @staticmethod
    def statistics(series: PriceHistorySeries) -> PriceStats:
        prices = series.prices
        return PriceStats(
            current=prices[-1],
            lowest=min(prices),
            highest=max(prices),
            average=round(sum(prices) / len(prices), 2),
        )

    @staticmethod
    def is_at_lowest_price(series: PriceHistorySeries) -> bool:
        prices = series.prices
        return prices[-1] <= min(prices)

    @staticmethod
    def price_change(product: Product) -> float | None:
        """Latest minus previous real sample, or ``None`` without two."""
        history = product.price_history
        if len(history) < 2:
            return None
        return round(history[-1].price - history[-2].price, 2)
