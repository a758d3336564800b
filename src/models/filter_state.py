# src/models/filter_state.py

"""Filter configuration value object for product discovery."""

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from src.models.errors import InvalidFilterError
from src.models.product import Marketplace

ALL = "all"


class SortOption(str, Enum):
    """Result ordering keys."""

    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    RATING_DESC = "rating_desc"
    SHIPPING_ASC = "shipping_asc"
    NEWEST = "newest"


def _all_marketplaces() -> dict[Marketplace, bool]:
    return {m: True for m in Marketplace}


@dataclass
class FilterConfiguration:
    """User-controlled search filters.

    ``min_price`` / ``max_price`` are inclusive; ``None`` means unbounded.
    ``condition`` and ``category`` take ``"all"`` or a specific value.
    """

    query: str = ""
    min_price: float | None = None
    max_price: float | None = None
    marketplaces: dict[Marketplace, bool] = field(
        default_factory=_all_marketplaces
    )
    condition: str = ALL
    category: str = ALL
    sort_by: SortOption = SortOption.RATING_DESC

    def enabled_marketplaces(self) -> list[Marketplace]:
        """Marketplaces whose inclusion flag is set, in enum order.

        A marketplace missing from the mapping counts as enabled.
        """
        return [m for m in Marketplace if self.marketplaces.get(m, True)]

    def validate(self) -> None:
        """Reject configurations no product could ever satisfy.

        Raises:
            InvalidFilterError: on a negative bound or min > max.
        """
        for name, bound in (
            ("min_price", self.min_price),
            ("max_price", self.max_price),
        ):
            if bound is not None and bound < 0:
                raise InvalidFilterError(
                    f"{name} must be >= 0 (got {bound})"
                )
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise InvalidFilterError(
                f"min_price {self.min_price} exceeds "
                f"max_price {self.max_price}"
            )

    def with_changes(self, **changes: Any) -> "FilterConfiguration":
        """Return an independent copy with *changes* applied."""
        clone = replace(self, **changes)
        if "marketplaces" not in changes:
            clone.marketplaces = copy.copy(self.marketplaces)
        return clone

    def cache_key(self) -> tuple[object, ...]:
        """Hashable, normalised identity used by the query cache."""
        return (
            self.query.strip().lower(),
            self.min_price,
            self.max_price,
            tuple(m.value for m in self.enabled_marketplaces()),
            self.condition.lower(),
            self.category.lower(),
            SortOption(self.sort_by).value,
        )


DEFAULT_FILTERS = FilterConfiguration()
