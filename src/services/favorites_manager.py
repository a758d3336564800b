# src/services/favorites_manager.py

"""Favorites set with a guest (local) and an authenticated (remote) mode."""

import logging

from src.config.settings import Settings
from src.models.errors import FavoritesSyncError, StorageError
from src.storage.favorites_store import SupabaseFavoritesStore
from src.storage.local_storage import LocalStorage

logger = logging.getLogger("pricefind.favorites")


class FavoritesManager:
    """Track favorited product ids for the current identity.

    Guest mode (``user_id is None``) keeps the set in client storage and
    every operation succeeds locally.  Authenticated mode applies each
    change optimistically, then calls the remote store; if that call
    fails the optimistic change is reverted (unless a newer change to
    the same id happened meanwhile) and ``error`` is set.

    Adding a present id or removing an absent one is a silent no-op.
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        remote: SupabaseFavoritesStore | None = None,
        user_id: str | None = None,
        storage_key: str | None = None,
    ) -> None:
        self._storage = storage or LocalStorage()
        self._remote = remote
        self._user_id = user_id
        self._key = storage_key or Settings.FAVORITES_STORAGE_KEY
        self._ids: dict[str, None] = {}
        self._op_seq: dict[str, int] = {}
        self.error: str | None = None
        self.loading = False
        if user_id is None:
            self._ids = dict.fromkeys(self._load_guest())

    # ── Identity ─────────────────────────────────────────

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    @property
    def remote(self) -> SupabaseFavoritesStore:
        if self._remote is None:
            self._remote = SupabaseFavoritesStore()
        return self._remote

    async def set_identity(self, user_id: str | None) -> None:
        """Switch backing mode when the user signs in or out.

        Signing in from guest mode uploads the guest favorites once and
        then clears them locally.  Signing out reloads the guest set.
        """
        if user_id == self._user_id:
            return
        was_guest = self._user_id is None
        self._user_id = user_id
        self._op_seq.clear()
        self.error = None

        if user_id is None:
            logger.info("Favorites switched to guest mode")
            self._ids = dict.fromkeys(self._load_guest())
            return

        logger.info("Favorites switched to user %s", user_id)
        self._ids = {}
        await self.refetch()
        if was_guest:
            await self._migrate_guest_favorites()

    async def _migrate_guest_favorites(self) -> None:
        guest_ids = self._load_guest()
        user_id = self._user_id
        if not guest_ids or user_id is None:
            return
        failed = 0
        for product_id in guest_ids:
            if product_id in self._ids:
                continue
            try:
                await self.remote.add(user_id, product_id)
            except FavoritesSyncError as exc:
                failed += 1
                logger.error(
                    "Could not migrate guest favorite %s: %s",
                    product_id,
                    exc,
                )
                continue
            self._ids[product_id] = None

        if failed:
            self.error = f"{failed} guest favorites could not be synced"
            return
        self._save_guest([])
        logger.info("Migrated %d guest favorites", len(guest_ids))

    # ── Guest storage ────────────────────────────────────

    def _load_guest(self) -> list[str]:
        raw = self._storage.get(self._key)
        if raw is None:
            return []
        if not isinstance(raw, list) or not all(
            isinstance(i, str) for i in raw
        ):
            logger.warning(
                "Discarding corrupt guest favorites '%s'", self._key,
            )
            return []
        return list(dict.fromkeys(raw))

    def _save_guest(self, ids: list[str]) -> None:
        try:
            self._storage.set(self._key, ids)
        except StorageError as exc:
            logger.error(
                "Guest favorites persistence failed: %s", exc, exc_info=True,
            )

    # ── Reads ────────────────────────────────────────────

    @property
    def favorite_ids(self) -> list[str]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def is_favorite(self, product_id: str) -> bool:
        return product_id in self._ids

    # ── Mutations ────────────────────────────────────────

    def _bump(self, product_id: str) -> int:
        seq = self._op_seq.get(product_id, 0) + 1
        self._op_seq[product_id] = seq
        return seq

    async def add_to_favorites(self, product_id: str) -> bool:
        """Favorite *product_id*.  Returns False if the remote call failed."""
        if product_id in self._ids:
            return True
        self._ids[product_id] = None
        seq = self._bump(product_id)

        if self._user_id is None:
            self._save_guest(self.favorite_ids)
            return True

        try:
            await self.remote.add(self._user_id, product_id)
        except FavoritesSyncError as exc:
            logger.error("Reverting favorite %s: %s", product_id, exc)
            self.error = str(exc)
            if self._op_seq.get(product_id) == seq:
                self._ids.pop(product_id, None)
            return False
        self.error = None
        return True

    async def remove_from_favorites(self, product_id: str) -> bool:
        """Un-favorite *product_id*.  Returns False if the remote call failed."""
        if product_id not in self._ids:
            return True
        self._ids.pop(product_id)
        seq = self._bump(product_id)

        if self._user_id is None:
            self._save_guest(self.favorite_ids)
            return True

        try:
            await self.remote.remove(self._user_id, product_id)
        except FavoritesSyncError as exc:
            logger.error("Reverting un-favorite %s: %s", product_id, exc)
            self.error = str(exc)
            if self._op_seq.get(product_id) == seq:
                self._ids[product_id] = None
            return False
        self.error = None
        return True

    async def toggle_favorite(self, product_id: str) -> bool:
        """Flip *product_id* and return whether it is now a favorite."""
        if product_id in self._ids:
            await self.remove_from_favorites(product_id)
        else:
            await self.add_to_favorites(product_id)
        return product_id in self._ids

    async def refetch(self) -> list[str]:
        """Reload the set from its backing store.

        On a remote failure the current set is kept and ``error`` set.
        """
        if self._user_id is None:
            self._ids = dict.fromkeys(self._load_guest())
            return self.favorite_ids

        user_id = self._user_id
        self.loading = True
        try:
            ids = await self.remote.list(user_id)
        except FavoritesSyncError as exc:
            logger.error("Favorites refetch failed: %s", exc)
            self.error = str(exc)
            return self.favorite_ids
        finally:
            self.loading = False

        if user_id != self._user_id:
            # Identity changed while the request was in flight.
            return self.favorite_ids
        self._ids = dict.fromkeys(ids)
        self._op_seq.clear()
        self.error = None
        return self.favorite_ids
