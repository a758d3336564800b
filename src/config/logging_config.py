# src/config/logging_config.py

"""Per-run timestamped logging configuration for pricefind.

Each launch writes a dedicated log file inside ``logs/`` named after the
launch time (e.g. ``logs/run_20261019_153045.log``).  Every
``pricefind.*`` logger routes through it, so the coordinator, the
cart/favorites managers and the sources all land in one per-run log.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

PROJECT_LOGGER = "pricefind"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _current_log_file(project_logger: logging.Logger) -> Path | None:
    for handler in project_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(
    console_level: int = logging.WARNING,
    logs_dir: Path | None = None,
) -> Path:
    """Attach the run's file and console handlers to ``pricefind``.

    Safe to call repeatedly: once configured, the existing run log is
    returned and no handlers are added.

    Returns:
        The :class:`~pathlib.Path` of this run's log file.
    """
    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(logging.DEBUG)

    existing = _current_log_file(project_logger)
    if existing is not None:
        return existing

    logs_dir = logs_dir or Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    # stderr only: stdout carries JSON in headless mode
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)
    project_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
