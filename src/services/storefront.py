# src/services/storefront.py

"""Wire the source, storage and managers together for a session."""

import logging
from dataclasses import dataclass, field

from src.services.cart_manager import CartManager
from src.services.favorites_manager import FavoritesManager
from src.services.price_history import PriceHistoryNormalizer
from src.services.query_coordinator import ProductQueryCoordinator
from src.sources.base_source import ProductSource
from src.sources.registry import build_source
from src.storage.favorites_store import SupabaseFavoritesStore
from src.storage.local_storage import LocalStorage

logger = logging.getLogger("pricefind.storefront")


@dataclass
class Storefront:
    """Everything a rendering layer needs, built once per session."""

    coordinator: ProductQueryCoordinator
    cart: CartManager
    favorites: FavoritesManager
    price_history: PriceHistoryNormalizer = field(
        default_factory=PriceHistoryNormalizer
    )

    async def load(self) -> None:
        """Fetch remote state; hosts await this before the first render."""
        if self.favorites.is_authenticated:
            await self.favorites.refetch()


def build_storefront(
    source: ProductSource | None = None,
    source_id: str | None = None,
    storage: LocalStorage | None = None,
    user_id: str | None = None,
    favorites_store: SupabaseFavoritesStore | None = None,
    debounce_wait: float | None = None,
) -> Storefront:
    """Create a :class:`Storefront` with explicitly injected collaborators.

    Construction does no I/O, so an authenticated user's favorites stay
    empty until :meth:`Storefront.load` is awaited.
    """
    storage = storage or LocalStorage()
    source = source or build_source(source_id)
    storefront = Storefront(
        coordinator=ProductQueryCoordinator(
            source, debounce_wait=debounce_wait
        ),
        cart=CartManager(storage),
        favorites=FavoritesManager(
            storage, remote=favorites_store, user_id=user_id
        ),
    )
    logger.debug(
        "Storefront ready (source=%s, user=%s)",
        source.source_name,
        user_id or "guest",
    )
    return storefront
