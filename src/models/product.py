# src/models/product.py

"""Product data model for inter-module data flow."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class Marketplace(str, Enum):
    """The two external sellers a listing can come from."""

    AMAZON = "AMAZON"
    EBAY = "EBAY"

    @classmethod
    def parse(cls, value: str) -> "Marketplace":
        """Accept ``amazon`` / ``AMAZON`` / ``Amazon`` alike."""
        return cls(str(value).strip().upper())


class Condition(str, Enum):
    """Item condition tag."""

    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"

    @classmethod
    def parse(cls, value: str) -> "Condition":
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class PricePoint:
    """A single dated price sample."""

    date: date
    price: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "price": self.price}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PricePoint":
        raw_date = str(data["date"])[:10]
        return cls(
            date=date.fromisoformat(raw_date),
            price=float(data["price"]),
        )


@dataclass(frozen=True)
class Product:
    """Represents a single product listing from either marketplace.

    Products are read-only to the core: sources build them, the filter
    engine and the managers only ever pass them around.
    """

    id: str
    marketplace: Marketplace
    title: str
    price: float
    currency: str = "USD"
    rating: float = 0.0
    rating_count: int = 0
    condition: Condition = Condition.NEW
    category: str = ""
    shipping_estimate: str = ""
    description: str | None = None
    original_price: float | None = None
    image_url: str = ""
    product_url: str = ""
    ships_to: tuple[str, ...] = ()
    price_history: tuple[PricePoint, ...] = field(default=())

    @property
    def discount_percent(self) -> int:
        """Whole-percent discount against ``original_price`` (0 if none)."""
        if not self.original_price or self.original_price <= self.price:
            return 0
        return round(
            (self.original_price - self.price) / self.original_price * 100
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase wire/storage shape."""
        return {
            "id": self.id,
            "marketplace": self.marketplace.value,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "originalPrice": self.original_price,
            "currency": self.currency,
            "rating": self.rating,
            "ratingCount": self.rating_count,
            "condition": self.condition.value,
            "category": self.category,
            "shippingEstimate": self.shipping_estimate,
            "imageUrl": self.image_url,
            "productUrl": self.product_url,
            "shipsTo": list(self.ships_to),
            "priceHistory": [p.to_dict() for p in self.price_history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Build a product from the camelCase wire/storage shape.

        Accepts ``_id`` as an alias for ``id`` (the product API uses it).
        Raises ``KeyError`` / ``ValueError`` on missing or bad fields.
        """
        raw_id = data.get("id", data.get("_id"))
        if raw_id is None:
            raise KeyError("id")
        original = data.get("originalPrice")
        history = data.get("priceHistory") or []
        return cls(
            id=str(raw_id),
            marketplace=Marketplace.parse(data["marketplace"]),
            title=str(data["title"]),
            price=float(data["price"]),
            currency=str(data.get("currency") or "USD"),
            rating=float(data.get("rating") or 0.0),
            rating_count=int(data.get("ratingCount") or 0),
            condition=Condition.parse(data.get("condition") or "new"),
            category=str(data.get("category") or ""),
            shipping_estimate=str(data.get("shippingEstimate") or ""),
            description=data.get("description") or None,
            original_price=(
                float(original) if original is not None else None
            ),
            image_url=str(data.get("imageUrl") or ""),
            product_url=str(data.get("productUrl") or ""),
            ships_to=tuple(data.get("shipsTo") or ()),
            price_history=tuple(
                PricePoint.from_dict(p) for p in history
            ),
        )
