# src/models/price_history.py

"""Display-only price history series and derived statistics."""

from dataclasses import dataclass

from src.models.product import PricePoint


@dataclass(frozen=True)
class PriceHistorySeries:
    """Ordered price samples, oldest first.

    ``synthesized`` is True when the samples were generated for display
    continuity rather than observed, so analytics can filter them out.
    """

    product_id: str
    points: tuple[PricePoint, ...]
    synthesized: bool = False

    @property
    def prices(self) -> list[float]:
        return [p.price for p in self.points]

    @property
    def first(self) -> PricePoint:
        return self.points[0]

    @property
    def latest(self) -> PricePoint:
        return self.points[-1]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class PriceStats:
    """Summary of a price series."""

    current: float
    lowest: float
    highest: float
    average: float
