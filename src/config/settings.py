# src/config/settings.py

"""Central configuration for the pricefind storefront engine."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pricefind storefront engine."""

    # --- Search ---
    SEARCH_DEBOUNCE: float = 0.3        # Quiet period before a query fires
    FETCH_TIMEOUT: float = 10.0         # Seconds before a fetch is failed
    REMOTE_PAGE_SIZE: int = 50          # Rows per remote query
    QUERY_CACHE_TTL: float = 300.0      # Remote result cache (secs)

    # --- Price history ---
    PRICE_HISTORY_WINDOW: int = 7       # Samples shown per product
    PRICE_HISTORY_MIN_POINTS: int = 2   # Below this, synthesize
    SYNTHETIC_VARIATION: float = 0.1    # +/- fraction for synthetic samples

    # --- Client storage ---
    CART_STORAGE_KEY: str = "find_cart"
    FAVORITES_STORAGE_KEY: str = "favorites"

    DEFAULT_CURRENCY: str = "USD"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    CATALOG_PATH: Path = BASE_DIR / "src" / "config" / "catalog.json"
    DATA_DIR: Path = BASE_DIR / "data"
    STORAGE_DIR: Path = DATA_DIR / "storage"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Remote backends ---
    PRODUCT_SOURCE: str = os.getenv("PRICEFIND_SOURCE", "catalog")
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
    PRODUCT_API_URL: str = os.getenv(
        "PRODUCT_API_URL", "http://localhost:8080/api"
    )
    IMPERSONATE_BROWSER: str = "chrome131"

    # --- Product sources (registry, selected by PRODUCT_SOURCE) ---
    AVAILABLE_SOURCES: list[dict[str, str]] = [
        {
            "id": "catalog",
            "label": "Local catalog",
            "source": "src.sources.catalog_source.CatalogSource",
        },
        {
            "id": "supabase",
            "label": "Supabase",
            "source": "src.sources.supabase_source.SupabaseProductSource",
        },
        {
            "id": "api",
            "label": "Product API",
            "source": "src.sources.api_source.ApiProductSource",
        },
    ]

    # --- Marketplaces ---
    MARKETPLACES: list[dict[str, str]] = [
        {"id": "AMAZON", "label": "Amazon"},
        {"id": "EBAY", "label": "eBay"},
    ]
