# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest

from src.config.settings import Settings
from src.models.product import Marketplace


class TestSettings(unittest.TestCase):
    """Verify Settings constants and registries."""

    def test_debounce_is_positive_float(self) -> None:
        self.assertIsInstance(Settings.SEARCH_DEBOUNCE, float)
        self.assertGreater(Settings.SEARCH_DEBOUNCE, 0)

    def test_fetch_timeout_exceeds_debounce(self) -> None:
        self.assertGreater(Settings.FETCH_TIMEOUT, Settings.SEARCH_DEBOUNCE)

    def test_query_cache_ttl_positive(self) -> None:
        self.assertGreater(Settings.QUERY_CACHE_TTL, 0)

    def test_history_window_covers_min_points(self) -> None:
        self.assertGreaterEqual(
            Settings.PRICE_HISTORY_WINDOW, Settings.PRICE_HISTORY_MIN_POINTS
        )

    def test_storage_keys(self) -> None:
        self.assertEqual(Settings.CART_STORAGE_KEY, "find_cart")
        self.assertEqual(Settings.FAVORITES_STORAGE_KEY, "favorites")

    def test_each_source_has_required_keys(self) -> None:
        """Every source must have id, label, and source keys."""
        for src in Settings.AVAILABLE_SOURCES:
            with self.subTest(src=src.get("id", "?")):
                self.assertIn("id", src)
                self.assertIn("label", src)
                self.assertIn("source", src)

    def test_source_ids_are_unique(self) -> None:
        ids = [s["id"] for s in Settings.AVAILABLE_SOURCES]
        self.assertEqual(len(ids), len(set(ids)))

    def test_marketplaces_match_enum(self) -> None:
        ids = {m["id"] for m in Settings.MARKETPLACES}
        self.assertEqual(ids, {m.value for m in Marketplace})

    def test_bundled_catalog_exists(self) -> None:
        self.assertTrue(Settings.CATALOG_PATH.exists())


if __name__ == "__main__":
    unittest.main()
