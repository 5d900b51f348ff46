"""
Unit tests for logging configuration.
"""

import json
import logging

from sf_import.utils.logging import JSONFileFormatter, configure_logging


class TestJSONFileFormatter:
    """Tests for the file formatter."""

    def test_strips_ansi_and_adds_app(self):
        record = logging.LogRecord(
            name="sf_import.importer",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="\x1b[32mBatch imported\x1b[0m",
            args=None,
            exc_info=None,
        )

        entry = json.loads(JSONFileFormatter().format(record))

        assert entry["event"] == "Batch imported"
        assert entry["level"] == "info"
        assert entry["app"] == "sf-import"


class TestConfigureLogging:
    """Tests for handler setup."""

    def test_file_handler_created(self, tmp_path):
        log_file = tmp_path / "logs" / "sf_import.log"

        configure_logging(level="ERROR", log_file=str(log_file))

        handlers = logging.getLogger().handlers
        assert log_file.parent.is_dir()
        assert any(isinstance(h, logging.FileHandler) for h in handlers)

        for handler in handlers:
            if isinstance(handler, logging.FileHandler):
                logging.getLogger().removeHandler(handler)
                handler.close()
