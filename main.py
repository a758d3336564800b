# main.py

"""Entry point for the pricefind application (TUI or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.models.filter_state import ALL, SortOption

logger = logging.getLogger("pricefind.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    source_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_SOURCES)
    marketplace_ids = ", ".join(m["id"] for m in Settings.MARKETPLACES)

    parser = argparse.ArgumentParser(
        prog="pricefind",
        description="Marketplace price comparison.",
        epilog=(
            f"Product sources: {source_ids}. "
            f"Marketplaces: {marketplace_ids}."
        ),
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query ('' matches everything). "
        "Omit to launch the interactive TUI.",
    )
    parser.add_argument(
        "-m",
        "--marketplaces",
        default=None,
        help="Comma-separated marketplace IDs (default: all).",
    )
    parser.add_argument(
        "--min-price", type=float, default=None, dest="min_price",
    )
    parser.add_argument(
        "--max-price", type=float, default=None, dest="max_price",
    )
    parser.add_argument(
        "-c",
        "--condition",
        choices=[ALL, "new", "used", "refurbished"],
        default=ALL,
    )
    parser.add_argument("--category", default=ALL)
    parser.add_argument(
        "--sort",
        choices=[s.value for s in SortOption],
        default=SortOption.RATING_DESC.value,
        dest="sort_by",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--source",
        default=None,
        dest="source_id",
        help=f"Product source (default: {Settings.PRODUCT_SOURCE}).",
    )
    parser.add_argument(
        "--cart",
        action="store_true",
        default=False,
        help="Show the saved cart grouped by marketplace.",
    )
    parser.add_argument(
        "--history",
        default=None,
        metavar="PRODUCT_ID",
        help="Show the recent price history of one product.",
    )
    return parser


def _run_tui(source_id: str | None) -> None:
    """Launch the interactive Textual TUI."""
    from src.services.storefront import build_storefront
    from src.ui.app import PricefindApp

    try:
        app = PricefindApp(build_storefront(source_id=source_id))
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("pricefind TUI shutting down")


def _run_cli(args: argparse.Namespace) -> None:
    """Run headless CLI search and exit."""
    from src.cli.runner import cli_search

    exit_code = asyncio.run(
        cli_search(
            query=args.query,
            marketplace_csv=args.marketplaces,
            min_price=args.min_price,
            max_price=args.max_price,
            condition=args.condition,
            category=args.category,
            sort_by=args.sort_by,
            output_format=args.output_format,
            source_id=args.source_id,
        )
    )
    sys.exit(exit_code)


def _run_cart() -> None:
    from src.cli.runner import show_cart

    sys.exit(show_cart())


def _run_history(product_id: str, source_id: str | None) -> None:
    from src.cli.runner import show_price_history

    sys.exit(asyncio.run(show_price_history(product_id, source_id)))


def main() -> None:
    """Route to TUI (no args) or headless CLI (query provided)."""
    log_file = setup_logging()
    logger.info("pricefind starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.cart:
        _run_cart()
    elif args.history is not None:
        _run_history(args.history, args.source_id)
    elif args.query is None:
        _run_tui(args.source_id)
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
