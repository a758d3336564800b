# tests/test_product_model.py

"""Tests for the Product dataclass and its enums."""

import dataclasses
import unittest
from datetime import date

from src.models.product import Condition, Marketplace, PricePoint, Product


class TestMarketplace(unittest.TestCase):

    def test_parse_is_case_insensitive(self) -> None:
        self.assertIs(Marketplace.parse("amazon"), Marketplace.AMAZON)
        self.assertIs(Marketplace.parse(" eBay "), Marketplace.EBAY)

    def test_parse_rejects_unknown(self) -> None:
        with self.assertRaises(ValueError):
            Marketplace.parse("walmart")


class TestProductModel(unittest.TestCase):
    """Product dataclass unit tests."""

    def test_defaults(self) -> None:
        """Optional fields default to expected values."""
        product = Product(
            id="1", marketplace=Marketplace.AMAZON, title="X", price=1.0,
        )
        self.assertEqual(product.currency, "USD")
        self.assertEqual(product.rating, 0.0)
        self.assertIs(product.condition, Condition.NEW)
        self.assertIsNone(product.description)
        self.assertEqual(product.price_history, ())

    def test_is_frozen(self) -> None:
        product = Product(
            id="1", marketplace=Marketplace.AMAZON, title="X", price=1.0,
        )
        with self.assertRaises(dataclasses.FrozenInstanceError):
            product.price = 2.0  # type: ignore[misc]

    def test_discount_percent(self) -> None:
        product = Product(
            id="1",
            marketplace=Marketplace.EBAY,
            title="X",
            price=75.0,
            original_price=100.0,
        )
        self.assertEqual(product.discount_percent, 25)

    def test_no_discount_without_original_price(self) -> None:
        product = Product(
            id="1", marketplace=Marketplace.EBAY, title="X", price=75.0,
        )
        self.assertEqual(product.discount_percent, 0)

    def test_from_dict_camel_case(self) -> None:
        product = Product.from_dict(
            {
                "_id": 42,
                "marketplace": "ebay",
                "title": "Lamp",
                "price": "19.5",
                "ratingCount": 7,
                "condition": "Used",
                "shippingEstimate": "3-5 days",
                "priceHistory": [
                    {"date": "2026-10-01T00:00:00Z", "price": 21},
                ],
            }
        )
        self.assertEqual(product.id, "42")
        self.assertIs(product.marketplace, Marketplace.EBAY)
        self.assertEqual(product.price, 19.5)
        self.assertEqual(product.rating_count, 7)
        self.assertIs(product.condition, Condition.USED)
        self.assertEqual(product.shipping_estimate, "3-5 days")
        self.assertEqual(
            product.price_history, (PricePoint(date(2026, 10, 1), 21.0),)
        )

    def test_from_dict_requires_id(self) -> None:
        with self.assertRaises(KeyError):
            Product.from_dict(
                {"marketplace": "AMAZON", "title": "X", "price": 1}
            )

    def test_to_dict_then_from_dict_preserves_product(self) -> None:
        product = Product(
            id="9",
            marketplace=Marketplace.AMAZON,
            title="Kettle",
            price=30.0,
            original_price=40.0,
            ships_to=("US", "CA"),
            price_history=(PricePoint(date(2026, 10, 18), 32.0),),
        )
        self.assertEqual(Product.from_dict(product.to_dict()), product)


if __name__ == "__main__":
    unittest.main()
