# src/models/cart.py

"""Shopping cart entry model."""

from dataclasses import dataclass
from typing import Any

from src.models.product import Product


@dataclass
class CartEntry:
    """A product and how many of it the shopper wants (always >= 1)."""

    product: Product
    quantity: int = 1

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {"product": self.product.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartEntry":
        return cls(
            product=Product.from_dict(data["product"]),
            quantity=int(data["quantity"]),
        )
