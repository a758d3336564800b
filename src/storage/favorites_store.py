# src/storage/favorites_store.py

"""Remote favorites store backed by the Supabase ``favorites`` table."""

import asyncio
import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client

from src.models.errors import FavoritesSyncError
from src.storage.supabase_client import get_supabase

logger = logging.getLogger("pricefind.favorites")

_DUPLICATE_KEY = "23505"


class SupabaseFavoritesStore:
    """``list`` / ``add`` / ``remove`` favorites for one user id.

    The Supabase client is blocking, so every call is pushed to a worker
    thread.  Failures surface as :class:`FavoritesSyncError`.
    """

    TABLE = "favorites"

    def __init__(self, client: Client | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    # ── Blocking helpers ─────────────────────────────────

    def _list_sync(self, user_id: str) -> list[str]:
        resp: Any = (
            self.client.table(self.TABLE)
            .select("product_id")
            .eq("user_id", user_id)
            .execute()
        )
        rows: list[dict[str, Any]] = resp.data or []
        return [str(r["product_id"]) for r in rows]

    def _add_sync(self, user_id: str, product_id: str) -> None:
        try:
            self.client.table(self.TABLE).insert(
                {"user_id": user_id, "product_id": product_id}
            ).execute()
        except APIError as exc:
            if exc.code == _DUPLICATE_KEY:
                logger.debug(
                    "Favorite %s already stored for %s",
                    product_id,
                    user_id,
                )
                return
            raise

    def _remove_sync(self, user_id: str, product_id: str) -> None:
        (
            self.client.table(self.TABLE)
            .delete()
            .eq("user_id", user_id)
            .eq("product_id", product_id)
            .execute()
        )

    # ── Async API ────────────────────────────────────────

    async def list(self, user_id: str) -> list[str]:
        """Return the product ids favorited by *user_id*."""
        try:
            return await asyncio.to_thread(self._list_sync, user_id)
        except Exception as exc:
            raise FavoritesSyncError(
                f"Failed to fetch favorites: {exc}"
            ) from exc

    async def add(self, user_id: str, product_id: str) -> None:
        """Favorite *product_id*; already-favorited is not an error."""
        try:
            await asyncio.to_thread(self._add_sync, user_id, product_id)
        except Exception as exc:
            raise FavoritesSyncError(
                f"Failed to add to favorites: {exc}"
            ) from exc

    async def remove(self, user_id: str, product_id: str) -> None:
        """Un-favorite *product_id*; a missing row is not an error."""
        try:
            await asyncio.to_thread(
                self._remove_sync, user_id, product_id
            )
        except Exception as exc:
            raise FavoritesSyncError(
                f"Failed to remove from favorites: {exc}"
            ) from exc
