# tests/test_favorites_manager.py

"""Tests for FavoritesManager in guest and authenticated modes."""

import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from src.models.errors import FavoritesSyncError
from src.services.favorites_manager import FavoritesManager
from src.storage.favorites_store import SupabaseFavoritesStore
from src.storage.local_storage import LocalStorage


def _remote(ids: list[str] | None = None) -> MagicMock:
    """A favorites store double whose async methods succeed by default."""
    remote = MagicMock(spec=SupabaseFavoritesStore)
    remote.list = AsyncMock(return_value=list(ids or []))
    remote.add = AsyncMock(return_value=None)
    remote.remove = AsyncMock(return_value=None)
    return remote


class _StorageCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()


class TestGuestFavorites(_StorageCase):

    async def test_add_remove_persist_locally(self) -> None:
        favorites = FavoritesManager(self.storage)
        self.assertTrue(await favorites.add_to_favorites("1"))
        await favorites.add_to_favorites("2")
        await favorites.remove_from_favorites("1")
        self.assertEqual(self.storage.get("favorites"), ["2"])
        self.assertEqual(FavoritesManager(self.storage).favorite_ids, ["2"])

    async def test_duplicates_are_noops(self) -> None:
        favorites = FavoritesManager(self.storage)
        await favorites.add_to_favorites("1")
        await favorites.add_to_favorites("1")
        self.assertEqual(len(favorites), 1)
        self.assertTrue(await favorites.remove_from_favorites("missing"))

    async def test_toggle_returns_new_state(self) -> None:
        favorites = FavoritesManager(self.storage)
        self.assertTrue(await favorites.toggle_favorite("5"))
        self.assertFalse(await favorites.toggle_favorite("5"))
        self.assertFalse(favorites.is_favorite("5"))

    async def test_corrupt_storage_starts_empty(self) -> None:
        self.storage.set("favorites", {"not": "a list"})
        self.assertEqual(FavoritesManager(self.storage).favorite_ids, [])


class TestAuthenticatedFavorites(_StorageCase):

    async def test_refetch_loads_remote_set(self) -> None:
        remote = _remote(["3", "4"])
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        self.assertEqual(await favorites.refetch(), ["3", "4"])
        remote.list.assert_awaited_once_with("u1")

    async def test_toggle_twice_restores_state(self) -> None:
        remote = _remote()
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        self.assertTrue(await favorites.toggle_favorite("1"))
        self.assertFalse(await favorites.toggle_favorite("1"))
        self.assertFalse(favorites.is_favorite("1"))
        self.assertIsNone(favorites.error)
        remote.add.assert_awaited_once_with("u1", "1")
        remote.remove.assert_awaited_once_with("u1", "1")
        self.assertIsNone(self.storage.get("favorites"))

    async def test_failed_add_is_reverted(self) -> None:
        remote = _remote()
        remote.add.side_effect = FavoritesSyncError("offline")
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        self.assertFalse(await favorites.add_to_favorites("1"))
        self.assertFalse(favorites.is_favorite("1"))
        self.assertEqual(favorites.error, "offline")

    async def test_failed_remove_is_reverted(self) -> None:
        remote = _remote(["1"])
        remote.remove.side_effect = FavoritesSyncError("offline")
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        await favorites.refetch()
        self.assertFalse(await favorites.remove_from_favorites("1"))
        self.assertTrue(favorites.is_favorite("1"))

    async def test_add_is_visible_before_remote_answers(self) -> None:
        gate = asyncio.Event()
        remote = _remote()

        async def slow_add(user_id: str, product_id: str) -> None:
            await gate.wait()

        remote.add.side_effect = slow_add
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        task = asyncio.create_task(favorites.add_to_favorites("1"))
        await asyncio.sleep(0)
        self.assertTrue(favorites.is_favorite("1"))
        gate.set()
        self.assertTrue(await task)

    async def test_stale_failure_does_not_undo_newer_change(self) -> None:
        gate = asyncio.Event()
        remote = _remote()

        async def failing_add(user_id: str, product_id: str) -> None:
            await gate.wait()
            raise FavoritesSyncError("late failure")

        remote.add.side_effect = failing_add
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        add_task = asyncio.create_task(favorites.add_to_favorites("1"))
        await asyncio.sleep(0)
        await favorites.remove_from_favorites("1")
        gate.set()
        await add_task
        self.assertFalse(favorites.is_favorite("1"))

    async def test_refetch_failure_keeps_current_set(self) -> None:
        remote = _remote(["1"])
        favorites = FavoritesManager(self.storage, remote, user_id="u1")
        await favorites.refetch()
        remote.list.side_effect = FavoritesSyncError("timeout")
        self.assertEqual(await favorites.refetch(), ["1"])
        self.assertEqual(favorites.error, "timeout")
        self.assertFalse(favorites.loading)

    async def test_local_storage_untouched(self) -> None:
        favorites = FavoritesManager(self.storage, _remote(), user_id="u1")
        await favorites.add_to_favorites("1")
        self.assertIsNone(self.storage.get("favorites"))


class TestIdentityChanges(_StorageCase):

    async def test_sign_in_migrates_guest_favorites(self) -> None:
        remote = _remote(["9"])
        favorites = FavoritesManager(self.storage, remote)
        await favorites.add_to_favorites("1")
        await favorites.add_to_favorites("9")

        await favorites.set_identity("u1")

        self.assertTrue(favorites.is_authenticated)
        self.assertEqual(favorites.favorite_ids, ["9", "1"])
        remote.add.assert_awaited_once_with("u1", "1")
        self.assertEqual(self.storage.get("favorites"), [])

    async def test_failed_migration_keeps_guest_copy(self) -> None:
        remote = _remote()
        remote.add.side_effect = FavoritesSyncError("offline")
        favorites = FavoritesManager(self.storage, remote)
        await favorites.add_to_favorites("1")

        await favorites.set_identity("u1")

        self.assertEqual(self.storage.get("favorites"), ["1"])
        self.assertIsNotNone(favorites.error)

    async def test_sign_out_reloads_guest_set(self) -> None:
        self.storage.set("favorites", ["7"])
        favorites = FavoritesManager(self.storage, _remote(["1"]), user_id="u1")
        await favorites.refetch()
        await favorites.set_identity(None)
        self.assertFalse(favorites.is_authenticated)
        self.assertEqual(favorites.favorite_ids, ["7"])


if __name__ == "__main__":
    unittest.main()
