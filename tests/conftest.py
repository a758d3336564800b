# tests/conftest.py

"""Shared pytest fixtures for all pricefind tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_dirs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Point every on-disk location at a per-test temp directory."""
    monkeypatch.setattr(Settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(Settings, "STORAGE_DIR", tmp_path / "data" / "storage")
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    yield
