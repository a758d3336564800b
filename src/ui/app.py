# src/ui/app.py

"""Terminal UI for the pricefind marketplace comparison."""

import logging
import webbrowser
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Static,
)

from src.config.settings import Settings
from src.models.filter_state import SortOption
from src.models.product import Marketplace, Product
from src.services.query_coordinator import QueryState, QueryStatus
from src.services.storefront import Storefront, build_storefront

logger = logging.getLogger("pricefind.ui")


class PricefindApp(App[object]):
    """Terminal UI for the pricefind marketplace comparison."""

    CSS = """
    #title { text-style: bold; padding: 0 1; }
    #search_bar { height: auto; }
    #search_input { width: 1fr; }
    #marketplace_toggles { height: auto; }
    #status { padding: 0 1; text-style: italic; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("p", "sort('price_asc')", "Price ↑"),
        Binding("P", "sort('price_desc')", "Price ↓"),
        Binding("r", "sort('rating_desc')", "Rating"),
        Binding("h", "sort('shipping_asc')", "Shipping"),
        Binding("n", "sort('newest')", "Newest"),
        Binding("a", "add_to_cart", "Add to Cart"),
        Binding("f", "toggle_favorite", "Favorite"),
        Binding("t", "retry", "Retry"),
    ]

    def __init__(self, storefront: Storefront | None = None) -> None:
        super().__init__()
        self.storefront = storefront or build_storefront()
        self.coordinator = self.storefront.coordinator
        self.products: list[Product] = []
        self._unsubscribe = self.coordinator.subscribe(self._on_state)

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        marketplace_checkboxes = [
            Checkbox(m["label"], value=True, id=f"check_{m['id']}")
            for m in Settings.MARKETPLACES
        ]
        names = ", ".join(m["label"] for m in Settings.MARKETPLACES)

        yield Header()
        yield Container(
            Static(f"🛒 Price Comparison ({names})", id="title"),

            # Search Bar
            Horizontal(
                Input(
                    placeholder="Search products...", id="search_input"
                ),
                Button("Search", variant="primary", id="search_btn"),
                id="search_bar",
            ),

            # Marketplace Selection Checkboxes
            Horizontal(*marketplace_checkboxes, id="marketplace_toggles"),

            Static("Ready", id="status"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="results_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            id="main_container",
        )
        yield Footer()

    async def on_mount(self) -> None:
        """Configure the table, then show the unfiltered catalogue."""
        table = self._table()
        table.add_columns(
            "♥", "Title", "Price", "Rating", "Condition", "Marketplace",
        )
        await self.storefront.load()
        self.run_worker(self.coordinator.search_now(), exclusive=True)

    async def on_unmount(self) -> None:
        self._unsubscribe()
        self.coordinator.cancel_pending()
        await self.storefront.cart.flush()

    def _table(self) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one("#results_table", DataTable),
        )

    # ── Input events ─────────────────────────────────────

    def on_input_changed(self, event: Input.Changed) -> None:
        """Debounced search while typing."""
        if event.input.id == "search_input":
            self.coordinator.set_query(event.value.strip())

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter skips the debounce window."""
        if event.input.id == "search_input":
            await self.coordinator.search_now()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "search_btn":
            await self.coordinator.search_now()

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        checkbox_id = event.checkbox.id or ""
        if not checkbox_id.startswith("check_"):
            return
        marketplace = Marketplace.parse(checkbox_id.removeprefix("check_"))
        self.coordinator.set_marketplace(marketplace, event.value)

    # ── State rendering ──────────────────────────────────

    def _on_state(self, state: QueryState) -> None:
        self.products = state.results
        self.populate_table()
        self._render_status(state)

    def _render_status(self, state: QueryState) -> None:
        status = self.query_one("#status", Static)
        cart = self.storefront.cart
        cart_text = (
            f"🛒 {cart.total_items()} "
            f"({Settings.DEFAULT_CURRENCY} {cart.total_price():,.2f})"
        )

        if state.status is QueryStatus.LOADING:
            status.update(f"🔍 Searching... {cart_text}")
        elif state.status is QueryStatus.FAILED:
            status.update(f"❌ {state.error} (t to retry)  {cart_text}")
        elif not state.results:
            status.update(f"No products found  {cart_text}")
        else:
            status.update(
                f"✅ {len(state.results)} of {state.total} products  "
                f"{cart_text}"
            )

    def populate_table(self) -> None:
        """Fill the DataTable with current product results."""
        table = self._table()
        table.clear()
        if not self.products:
            return

        favorites = self.storefront.favorites
        min_price = min(p.price for p in self.products)

        for p in self.products:
            price_style = "bold green" if p.price == min_price else ""
            table.add_row(
                "♥" if favorites.is_favorite(p.id) else "",
                p.title[:60],
                Text(f"{p.price:,.2f} {p.currency}", style=price_style),
                f"⭐ {p.rating}" if p.rating else "",
                p.condition.value,
                p.marketplace.value,
                key=p.id,
            )

    def _selected(self) -> Product | None:
        row = self._table().cursor_row
        if 0 <= row < len(self.products):
            return self.products[row]
        return None

    # ── Actions ──────────────────────────────────────────

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected
    ) -> None:
        """Open the selected product's URL in the default browser."""
        if 0 <= event.cursor_row < len(self.products):
            url = self.products[event.cursor_row].product_url
            if url:
                webbrowser.open(url)

    def action_sort(self, sort_by: str) -> None:
        self.coordinator.update_filter(sort_by=SortOption(sort_by))

    async def action_retry(self) -> None:
        if self.coordinator.state.can_retry:
            await self.coordinator.retry()

    def action_add_to_cart(self) -> None:
        product = self._selected()
        if product is None:
            self.notify("No product selected", severity="warning")
            return
        self.storefront.cart.add_to_cart(product)
        self.notify(f"Added to cart: {product.title[:40]}")
        self._render_status(self.coordinator.state)

    async def action_toggle_favorite(self) -> None:
        product = self._selected()
        if product is None:
            self.notify("No product selected", severity="warning")
            return
        favorites = self.storefront.favorites
        now_favorite = await favorites.toggle_favorite(product.id)
        if favorites.error:
            self.notify(f"Favorite failed: {favorites.error}", severity="error")
        else:
            self.notify("♥ Favorited" if now_favorite else "Unfavorited")
        self.populate_table()
