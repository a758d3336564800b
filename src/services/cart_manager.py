# src/services/cart_manager.py

"""Shopping cart state with write-behind persistence to client storage."""

import asyncio
import dataclasses
import logging
from typing import Any

from src.config.settings import Settings
from src.models.cart import CartEntry
from src.models.errors import StorageError
from src.models.product import Marketplace, Product
from src.storage.local_storage import LocalStorage

logger = logging.getLogger("pricefind.cart")


class CartManager:
    """Ordered ``product id -> CartEntry`` mapping.

    Mutations update memory synchronously.  Persistence of the whole
    cart is scheduled on the running event loop (or done inline when no
    loop is running); a failed write is logged and the in-memory cart
    is kept as is.  Totals are computed on every read.
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        storage_key: str | None = None,
    ) -> None:
        self._storage = storage or LocalStorage()
        self._key = storage_key or Settings.CART_STORAGE_KEY
        self._entries: dict[str, CartEntry] = self._load()
        self._version = 0
        self._persisted_version = 0
        self._write_lock = asyncio.Lock()
        self._pending: set[asyncio.Future[Any]] = set()

    # ── Loading ──────────────────────────────────────────

    def _load(self) -> dict[str, CartEntry]:
        raw = self._storage.get(self._key)
        if raw is None:
            return {}
        try:
            entries = [CartEntry.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning(
                "Discarding corrupt persisted cart '%s': %s", self._key, exc,
            )
            return {}

        loaded: dict[str, CartEntry] = {}
        for entry in entries:
            if entry.quantity < 1:
                continue
            existing = loaded.get(entry.product.id)
            if existing is not None:
                existing.quantity += entry.quantity
            else:
                loaded[entry.product.id] = entry
        logger.info("Restored cart with %d entries", len(loaded))
        return loaded

    # ── Mutations ────────────────────────────────────────

    def add_to_cart(self, product: Product, quantity: int = 1) -> None:
        """Add *quantity* of *product*, summing with any existing entry."""
        if quantity < 1:
            logger.warning(
                "Ignoring add of %d x %s (quantity must be >= 1)",
                quantity,
                product.id,
            )
            return
        existing = self._entries.get(product.id)
        if existing is not None:
            existing.quantity += quantity
        else:
            self._entries[product.id] = CartEntry(product, quantity)
        logger.debug("Added %d x %s to cart", quantity, product.id)
        self._changed()

    def remove_from_cart(self, product_id: str) -> None:
        if self._entries.pop(product_id, None) is None:
            return
        logger.debug("Removed %s from cart", product_id)
        self._changed()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set an entry's quantity; ``<= 0`` removes it."""
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return
        entry = self._entries.get(product_id)
        if entry is None:
            logger.debug("Quantity update for %s not in cart", product_id)
            return
        if entry.quantity == quantity:
            return
        entry.quantity = quantity
        self._changed()

    def clear_cart(self) -> None:
        if not self._entries:
            return
        self._entries.clear()
        logger.info("Cart cleared")
        self._changed()

    # ── Derived reads ────────────────────────────────────

    @property
    def items(self) -> list[CartEntry]:
        """Entries in insertion order (copies, safe to mutate)."""
        return [dataclasses.replace(e) for e in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)

    def total_items(self) -> int:
        return sum(e.quantity for e in self._entries.values())

    def total_price(self) -> float:
        return round(sum(e.subtotal for e in self._entries.values()), 2)

    def is_in_cart(self, product_id: str) -> bool:
        return product_id in self._entries

    def get_item_quantity(self, product_id: str) -> int:
        entry = self._entries.get(product_id)
        return entry.quantity if entry else 0

    def items_by_marketplace(
        self, marketplace: Marketplace | str,
    ) -> list[CartEntry]:
        wanted = Marketplace.parse(marketplace)
        return [e for e in self.items if e.product.marketplace is wanted]

    def grouped_by_marketplace(self) -> dict[Marketplace, list[CartEntry]]:
        """Non-empty entry groups per marketplace, for split checkout."""
        groups: dict[Marketplace, list[CartEntry]] = {}
        for entry in self.items:
            groups.setdefault(entry.product.marketplace, []).append(entry)
        return groups

    # ── Persistence ──────────────────────────────────────

    def _snapshot(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self._entries.values()]

    def _write(self, snapshot: list[dict[str, Any]]) -> bool:
        try:
            self._storage.set(self._key, snapshot)
        except StorageError as exc:
            logger.error("Cart persistence failed: %s", exc, exc_info=True)
            return False
        return True

    def _changed(self) -> None:
        self._version += 1
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._write(self._snapshot()):
                self._persisted_version = self._version
            return

        task = loop.create_task(self._persist(self._version))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, version: int) -> None:
        # Writes are serialised and coalesced: a queued write that has
        # been overtaken by a newer persisted snapshot is skipped.
        async with self._write_lock:
            if self._persisted_version >= version:
                return
            current = self._version
            ok = await asyncio.to_thread(self._write, self._snapshot())
            if ok:
                self._persisted_version = current

    async def flush(self) -> None:
        """Wait for scheduled writes to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
