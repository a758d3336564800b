# src/storage/local_storage.py

"""Durable client-side key/value storage backed by JSON files."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.errors import StorageError

logger = logging.getLogger("pricefind.storage")

_UNSAFE_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]")


class LocalStorage:
    """One JSON document per key, stored under ``STORAGE_DIR``.

    Reads never raise: a missing, unreadable or corrupt entry reads as
    ``None`` so callers fall back to their empty default.  Writes raise
    :class:`StorageError` and leave any previous value intact.
    """

    def __init__(self, storage_dir: Path | None = None) -> None:
        self.storage_dir: Path = storage_dir or Settings.STORAGE_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "LocalStorage initialised, storage_dir=%s", self.storage_dir,
        )

    def _path_for(self, key: str) -> Path:
        safe = _UNSAFE_KEY_RE.sub("_", key)
        return self.storage_dir / f"{safe}.json"

    def get(self, key: str) -> Any | None:
        """Return the stored JSON value for *key*, or ``None``."""
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "Discarding unreadable storage entry '%s': %s", key, exc,
            )
            return None

    def set(self, key: str, value: Any) -> None:
        """Persist *value* under *key* (atomic replace)."""
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(
                f"Failed to write storage key '{key}': {exc}"
            ) from exc
        logger.debug("Stored key '%s' at %s", key, path)

    def remove(self, key: str) -> None:
        """Delete *key* if present."""
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(
                f"Failed to remove storage key '{key}': {exc}"
            ) from exc
