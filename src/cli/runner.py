# src/cli/runner.py

"""Headless CLI: search, cart summary and price history, via the core."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.filter_state import ALL, FilterConfiguration, SortOption
from src.models.product import Marketplace, Product
from src.services.cart_manager import CartManager
from src.services.price_history import PriceHistoryNormalizer, Trend
from src.services.query_coordinator import QueryStatus
from src.services.storefront import build_storefront
from src.sources.base_source import LocalProductSource
from src.sources.registry import build_source

logger = logging.getLogger("pricefind.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def resolve_marketplaces(
    marketplace_csv: str | None,
) -> dict[Marketplace, bool]:
    """Map a comma-separated list of marketplace ids to inclusion flags.

    Enables every marketplace when *marketplace_csv* is ``None``.
    Raises ``SystemExit`` on unknown ids.
    """
    if marketplace_csv is None:
        return {m: True for m in Marketplace}

    requested = [
        s.strip().upper() for s in marketplace_csv.split(",") if s.strip()
    ]
    known = {m.value for m in Marketplace}
    unknown = [r for r in requested if r not in known]
    if unknown:
        valid = ", ".join(s["id"] for s in Settings.MARKETPLACES)
        _err.print(
            f"[red]Unknown marketplace(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)

    return {m: m.value in requested for m in Marketplace}


def _products_to_dicts(products: list[Product]) -> list[dict[str, object]]:
    """Serialise a product list to plain dicts for JSON output."""
    return [
        {
            "id": p.id,
            "title": p.title,
            "price": p.price,
            "currency": p.currency,
            "rating": p.rating,
            "condition": p.condition.value,
            "category": p.category,
            "shipping": p.shipping_estimate,
            "marketplace": p.marketplace.value,
            "url": p.product_url,
        }
        for p in products
    ]


def _print_table(products: list[Product]) -> None:
    """Render a Rich table of products, in result order, to stdout."""
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("ID", style="dim")
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Condition")
    table.add_column("Shipping")
    table.add_column("Marketplace", style="magenta")

    cheapest = min((p.price for p in products), default=0.0)
    for idx, p in enumerate(products, 1):
        price_str = f"{p.currency} {p.price:,.2f}"
        if p.price == cheapest:
            price_str = f"[bold]{price_str}[/bold]"
        table.add_row(
            str(idx),
            p.id,
            p.title[:60],
            price_str,
            f"{p.rating:.1f} ({p.rating_count:,})",
            p.condition.value,
            p.shipping_estimate or "-",
            p.marketplace.value,
        )

    Console().print(table)


async def cli_search(
    query: str,
    marketplace_csv: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    condition: str = ALL,
    category: str = ALL,
    sort_by: str = SortOption.RATING_DESC.value,
    output_format: str = "json",
    source_id: str | None = None,
) -> int:
    """Run a headless search and return an exit code (0=ok, 1=fail)."""
    filters = FilterConfiguration(
        query=query,
        min_price=min_price,
        max_price=max_price,
        marketplaces=resolve_marketplaces(marketplace_csv),
        condition=condition,
        category=category,
        sort_by=SortOption(sort_by),
    )

    try:
        storefront = build_storefront(source_id=source_id)
    except (ValueError, RuntimeError) as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    _err.print(
        f"[bold]Searching:[/bold] {query or '(everything)'}  "
        f"[dim]source={storefront.coordinator.source.source_name} "
        f"sort={filters.sort_by.value}[/dim]"
    )

    state = await storefront.coordinator.search_now(filters)

    if state.status is QueryStatus.FAILED:
        _err.print(f"[red]Error: {state.error}[/red]")
        return 1

    if not state.results:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    _err.print(
        f"[green]✓ {len(state.results)} products"
        f" of {state.total}[/green]"
    )

    if output_format == "table":
        _print_table(state.results)
    else:
        json.dump(
            _products_to_dicts(state.results),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


def show_cart(cart: CartManager | None = None) -> int:
    """Print the persisted cart grouped by marketplace."""
    cart = cart or CartManager()
    if not len(cart):
        _err.print("[yellow]Your cart is empty.[/yellow]")
        return 0

    table = Table(
        title="Cart",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Marketplace", style="magenta")
    table.add_column("Title", max_width=60)
    table.add_column("Qty", justify="right")
    table.add_column("Subtotal", justify="right", style="green")

    for marketplace, entries in cart.grouped_by_marketplace().items():
        for entry in entries:
            table.add_row(
                marketplace.value,
                entry.product.title[:60],
                str(entry.quantity),
                f"{entry.product.currency} {entry.subtotal:,.2f}",
            )

    Console().print(table)
    _err.print(
        f"[bold]{cart.total_items()} items, "
        f"total {Settings.DEFAULT_CURRENCY} {cart.total_price():,.2f}[/bold]"
    )
    return 0


async def show_price_history(
    product_id: str,
    source_id: str | None = None,
    normalizer: PriceHistoryNormalizer | None = None,
) -> int:
    """Print the recent price window for one product."""
    try:
        source = build_source(source_id)
        if isinstance(source, LocalProductSource):
            product = source.get_product(product_id)
        else:
            product = await source.get_product(product_id)
    except Exception as exc:
        logger.error("Price history lookup failed", exc_info=True)
        _err.print(f"[red]Lookup failed: {exc}[/red]")
        return 1

    if product is None:
        _err.print(f"[yellow]No product with id {product_id}.[/yellow]")
        return 1

    normalizer = normalizer or PriceHistoryNormalizer()
    series = normalizer.recent_window(product)
    stats = normalizer.statistics(series)
    trend = normalizer.trend(series)

    title = f"Price History: {product.title[:60]}"
    if series.synthesized:
        title += " (simulated)"
    table = Table(title=title, title_style="bold cyan")
    table.add_column("Date")
    table.add_column("Price", justify="right", style="green")
    for point in series.points:
        table.add_row(
            point.date.isoformat(),
            f"{product.currency} {point.price:,.2f}",
        )
    Console().print(table)

    arrow = {Trend.DOWN: "↓", Trend.UP: "↑", Trend.FLAT: "→"}[trend]
    _err.print(
        f"{arrow} current {stats.current:,.2f}  low {stats.lowest:,.2f}  "
        f"high {stats.highest:,.2f}  avg {stats.average:,.2f}"
    )
    return 0
