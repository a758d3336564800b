# tests/test_query_cache.py

"""Tests for the in-memory TTL query cache."""

import unittest
from unittest.mock import patch

from src.models.filter_state import FilterConfiguration, SortOption
from src.models.product import Marketplace, Product
from src.storage.query_cache import QueryCache


def _p(pid: str) -> Product:
    """Create a minimal Product for testing."""
    return Product(
        id=pid, marketplace=Marketplace.AMAZON, title="Lamp", price=10.0,
    )


class TestQueryCache(unittest.TestCase):
    """QueryCache unit tests."""

    def setUp(self) -> None:
        self.cache = QueryCache(ttl=60)

    # ── Store & retrieve ─────────────────────────────────

    def test_miss_on_empty_cache(self) -> None:
        self.assertIsNone(self.cache.get(FilterConfiguration(query="x")))

    def test_hit_ignores_query_case(self) -> None:
        self.cache.store(FilterConfiguration(query="Lamp"), [_p("1")], 5)
        result = self.cache.get(FilterConfiguration(query=" lamp"))
        self.assertIsNotNone(result)
        assert result is not None
        products, total = result
        self.assertEqual([p.id for p in products], ["1"])
        self.assertEqual(total, 5)

    def test_different_sort_is_a_miss(self) -> None:
        self.cache.store(FilterConfiguration(query="lamp"), [_p("1")], 1)
        self.assertIsNone(
            self.cache.get(
                FilterConfiguration(query="lamp", sort_by=SortOption.PRICE_ASC)
            )
        )

    def test_returned_list_is_a_copy(self) -> None:
        filters = FilterConfiguration(query="lamp")
        self.cache.store(filters, [_p("1")], 1)
        first = self.cache.get(filters)
        assert first is not None
        first[0].clear()
        second = self.cache.get(filters)
        assert second is not None
        self.assertEqual(len(second[0]), 1)

    # ── TTL & purge ──────────────────────────────────────

    def test_expired_entries_evicted(self) -> None:
        filters = FilterConfiguration(query="lamp")
        with patch("src.storage.query_cache.time.time", return_value=1000.0):
            self.cache.store(filters, [_p("1")], 1)
        with patch("src.storage.query_cache.time.time", return_value=1061.0):
            self.assertIsNone(self.cache.get(filters))
        self.assertEqual(len(self.cache), 0)

    def test_clear_returns_count(self) -> None:
        self.cache.store(FilterConfiguration(query="a"), [], 0)
        self.cache.store(FilterConfiguration(query="b"), [], 0)
        self.assertEqual(self.cache.clear(), 2)
        self.assertEqual(len(self.cache), 0)


if __name__ == "__main__":
    unittest.main()
