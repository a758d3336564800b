# src/sources/registry.py

"""Resolve the configured product source from the Settings registry."""

import importlib
import logging
from typing import Any

from src.config.settings import Settings
from src.sources.base_source import ProductSource

logger = logging.getLogger("pricefind.sources")


def _load_source_class(dotted_path: str) -> type[Any]:
    """Dynamically import a source class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def build_source(source_id: str | None = None) -> ProductSource:
    """Instantiate the product source registered under *source_id*.

    Defaults to ``Settings.PRODUCT_SOURCE``.

    Raises:
        ValueError: for an id not present in ``AVAILABLE_SOURCES``.
    """
    wanted = source_id or Settings.PRODUCT_SOURCE
    available = {s["id"]: s for s in Settings.AVAILABLE_SOURCES}
    if wanted not in available:
        valid = ", ".join(sorted(available))
        raise ValueError(
            f"Unknown product source '{wanted}' (available: {valid})"
        )
    cls = _load_source_class(available[wanted]["source"])
    logger.info("Using product source '%s'", wanted)
    source: ProductSource = cls()
    return source
