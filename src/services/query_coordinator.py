# src/services/query_coordinator.py

"""Debounced, stale-safe product search over a local or remote source."""

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.config.settings import Settings
from src.filters.product_filter import ProductFilter
from src.models.errors import InvalidFilterError
from src.models.filter_state import FilterConfiguration
from src.models.product import Product
from src.services.debouncer import Debouncer
from src.sources.base_source import (
    LocalProductSource,
    ProductSource,
    RemoteProductSource,
)
from src.storage.query_cache import QueryCache

logger = logging.getLogger("pricefind.coordinator")


class QueryStatus(str, Enum):
    """Lifecycle of the visible result set."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryState:
    """Snapshot published to the rendering layer.

    A ``FAILED`` state keeps the last successful results next to the
    error so the view can show stale data with a retry affordance.
    """

    status: QueryStatus = QueryStatus.IDLE
    results: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    total: int = 0
    error: str | None = None
    request_id: int = 0

    @property
    def loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    @property
    def can_retry(self) -> bool:
        return self.status is QueryStatus.FAILED


StateListener = Callable[[QueryState], None]


class ProductQueryCoordinator:
    """Turn filter/query changes into published result states.

    Every change re-arms a debounce timer; when it fires, the current
    filters are fetched from the source.  Each scheduled fetch takes a
    new request id, and a response may only commit if its id is still
    the latest, so late answers to superseded requests are dropped.

    Local sources are filtered here with :class:`ProductFilter`; remote
    sources receive the filters and do the translation themselves.
    """

    def __init__(
        self,
        source: ProductSource,
        debounce_wait: float | None = None,
        timeout: float | None = None,
        cache: QueryCache | None = None,
        filters: FilterConfiguration | None = None,
    ) -> None:
        self._source = source
        self._timeout = (
            timeout if timeout is not None else Settings.FETCH_TIMEOUT
        )
        self._filters = (
            filters.with_changes() if filters else FilterConfiguration()
        )
        self._cache = cache
        if self._cache is None and isinstance(source, RemoteProductSource):
            self._cache = QueryCache()
        self._state = QueryState()
        self._listeners: list[StateListener] = []
        self._request_seq = 0
        self._last_filters: FilterConfiguration | None = None
        self._debouncer: Debouncer[
            tuple[int, FilterConfiguration]
        ] = Debouncer(
            self._fire_scheduled,
            debounce_wait
            if debounce_wait is not None
            else Settings.SEARCH_DEBOUNCE,
        )

    # ── Read side ────────────────────────────────────────

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def filters(self) -> FilterConfiguration:
        """A copy of the current filters (mutate via the setters)."""
        return self._filters.with_changes()

    @property
    def source(self) -> ProductSource:
        return self._source

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for state changes; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Write side (debounced) ───────────────────────────

    def set_query(self, query: str) -> None:
        self._filters.query = query
        self._schedule()

    def update_filter(self, **changes: Any) -> None:
        """Change one or more filter fields, e.g. ``sort_by=...``."""
        known = {f.name for f in dataclasses.fields(FilterConfiguration)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(
                f"Unknown filter field(s): {', '.join(sorted(unknown))}"
            )
        self._filters = self._filters.with_changes(**changes)
        self._schedule()

    def set_marketplace(self, marketplace: Any, enabled: bool) -> None:
        marketplaces = dict(self._filters.marketplaces)
        marketplaces[marketplace] = enabled
        self.update_filter(marketplaces=marketplaces)

    def set_filters(self, filters: FilterConfiguration) -> None:
        self._filters = filters.with_changes()
        self._schedule()

    def _next_request_id(self) -> int:
        self._request_seq += 1
        return self._request_seq

    def _schedule(self) -> None:
        # Taking the id now supersedes any fetch already in flight.
        request_id = self._next_request_id()
        self._debouncer((request_id, self._filters.with_changes()))

    def _fire_scheduled(
        self, scheduled: tuple[int, FilterConfiguration],
    ) -> Any:
        request_id, filters = scheduled
        return self._fetch(request_id, filters)

    # ── Immediate triggers ───────────────────────────────

    async def search_now(
        self, filters: FilterConfiguration | None = None,
    ) -> QueryState:
        """Skip the debounce window and fetch immediately."""
        self._debouncer.cancel()
        if filters is not None:
            self._filters = filters.with_changes()
        request_id = self._next_request_id()
        await self._fetch(request_id, self._filters.with_changes())
        return self._state

    async def retry(self) -> QueryState:
        """Re-issue the last fetch (typically after ``FAILED``)."""
        return await self.search_now(self._last_filters)

    async def settle(self) -> QueryState:
        """Fire any pending debounced fetch and wait for it to finish."""
        await self._debouncer.drain()
        return self._state

    def cancel_pending(self) -> bool:
        return self._debouncer.cancel()

    # ── Fetching ─────────────────────────────────────────

    async def _run_source(
        self, filters: FilterConfiguration,
    ) -> tuple[list[Product], int]:
        if isinstance(self._source, LocalProductSource):
            products = ProductFilter.apply(
                self._source.list_all(), filters.query, filters
            )
            return products, len(products)

        if self._cache is not None:
            cached = self._cache.get(filters)
            if cached is not None:
                return cached

        result = await self._source.query(filters)
        if self._cache is not None:
            self._cache.store(filters, result.products, result.total)
        return result.products, result.total

    async def _fetch(
        self, request_id: int, filters: FilterConfiguration,
    ) -> None:
        if request_id != self._request_seq:
            return
        self._last_filters = filters

        try:
            filters.validate()
        except InvalidFilterError as exc:
            logger.info("Rejected filters for request %d: %s", request_id, exc)
            self._commit(
                request_id,
                status=QueryStatus.FAILED,
                results=self._state.results,
                total=self._state.total,
                error=str(exc),
            )
            return

        self._commit(
            request_id,
            status=QueryStatus.LOADING,
            results=self._state.results,
            total=self._state.total,
            error=None,
        )

        try:
            products, total = await asyncio.wait_for(
                self._run_source(filters), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Request %d for '%s' timed out after %.1fs",
                request_id,
                filters.query,
                self._timeout,
            )
            self._commit(
                request_id,
                status=QueryStatus.FAILED,
                results=self._state.results,
                total=self._state.total,
                error=f"Request timed out after {self._timeout:g}s",
            )
            return
        except Exception as exc:
            logger.error(
                "Request %d for '%s' failed: %s",
                request_id,
                filters.query,
                exc,
                exc_info=True,
            )
            self._commit(
                request_id,
                status=QueryStatus.FAILED,
                results=self._state.results,
                total=self._state.total,
                error=str(exc) or exc.__class__.__name__,
            )
            return

        self._commit(
            request_id,
            status=QueryStatus.READY,
            results=products,
            total=total,
            error=None,
        )

    def _commit(
        self,
        request_id: int,
        status: QueryStatus,
        results: list[Product],
        total: int,
        error: str | None,
    ) -> None:
        if request_id != self._request_seq:
            logger.debug(
                "Discarding %s from superseded request %d (latest %d)",
                status.value,
                request_id,
                self._request_seq,
            )
            return
        self._state = QueryState(
            status=status,
            results=list(results),
            total=total,
            error=error,
            request_id=request_id,
        )
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.error("State listener raised", exc_info=True)

    # ── Supporting lookups ───────────────────────────────

    async def categories(self) -> list[str]:
        """Category labels for filter menus; ``[]`` if the source fails."""
        try:
            if isinstance(self._source, LocalProductSource):
                return self._source.categories()
            return await self._source.categories()
        except Exception as exc:
            logger.error(
                "Failed to fetch categories: %s", exc, exc_info=True,
            )
            return []

    def clear_cache(self) -> int:
        return self._cache.clear() if self._cache is not None else 0
