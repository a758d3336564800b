# src/storage/supabase_client.py

"""Shared Supabase client for the remote product and favorites stores."""

from functools import lru_cache

from supabase import Client, create_client

from src.config.settings import Settings


@lru_cache()
def get_supabase() -> Client:
    """Build (once) the Supabase client from ``Settings``.

    Raises:
        RuntimeError: when the URL/key are missing or still placeholders.
    """
    url = Settings.SUPABASE_URL
    key = Settings.SUPABASE_KEY

    if not url or not key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_ANON_KEY must be set "
            "(in the environment or .env) to use the Supabase backend."
        )
    if "your-project.supabase.co" in url:
        raise RuntimeError(
            "SUPABASE_URL in .env is still the placeholder (your-project). "
            "Fill in your real project URL and anon key."
        )
    return create_client(url, key)
