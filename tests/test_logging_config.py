# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import tempfile
import unittest
from pathlib import Path

from src.config.logging_config import setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the pricefind logger before each test."""
        self.root_logger = logging.getLogger("pricefind")
        self.root_logger.handlers.clear()

    def tearDown(self) -> None:
        for handler in list(self.root_logger.handlers):
            handler.close()
        self.root_logger.handlers.clear()

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_file_handler_level_debug(self) -> None:
        """File handler should be set to DEBUG level."""
        setup_logging()
        file_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)

    def test_console_level_is_configurable(self) -> None:
        """The console handler honours the requested level."""
        setup_logging(console_level=logging.INFO)
        stream_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(stream_handlers[0].level, logging.INFO)

    def test_repeated_calls_reuse_the_run_log(self) -> None:
        """A second call adds no handlers and returns the same file."""
        first = setup_logging()
        count_before = len(self.root_logger.handlers)
        second = setup_logging()
        self.assertEqual(count_before, len(self.root_logger.handlers))
        self.assertEqual(first, second)

    def test_explicit_logs_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = setup_logging(logs_dir=Path(tmp) / "custom")
            self.assertEqual(log_path.parent, Path(tmp) / "custom")
            self.tearDown()

    def test_child_loggers_reach_the_run_log(self) -> None:
        """Records from pricefind.* modules end up in the file."""
        log_path = setup_logging()
        logging.getLogger("pricefind.cart").debug("cart probe")
        for handler in self.root_logger.handlers:
            handler.flush()
        self.assertIn("cart probe", log_path.read_text(encoding="utf-8"))

    def test_log_file_inside_logs_dir(self) -> None:
        """Log file is created inside the logs/ directory."""
        log_path = setup_logging()
        self.assertEqual(log_path.parent.name, "logs")


if __name__ == "__main__":
    unittest.main()
