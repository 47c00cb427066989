"""
Tests for structured logging setup and event helpers.
"""
import logging

import pytest
from pythonjsonlogger import jsonlogger

from app.utils.logging import StructuredLogger, configure_logging, log_folder_resolved


class TestConfigureLogging:
    """Tests for the logging entry point used at startup."""

    @pytest.fixture
    def root_logger(self, monkeypatch) -> logging.Logger:
        # Fresh root so pytest's capture handlers stay untouched
        root = logging.RootLogger(logging.WARNING)
        monkeypatch.setattr(logging, "root", root)
        monkeypatch.setattr(StructuredLogger, "_configured", False)
        monkeypatch.setattr(StructuredLogger, "_service_name", None)
        return root

    def test_installs_json_handler_with_service(self, root_logger: logging.Logger):
        """Test configure_logging sets a JSON handler tagging records with the service."""
        configure_logging("memories-api", "warning")

        assert len(root_logger.handlers) == 1
        handler = root_logger.handlers[0]
        assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
        assert root_logger.level == logging.WARNING

        record = logging.LogRecord("app", logging.WARNING, __file__, 1, "msg", None, None)
        assert handler.filter(record)
        assert record.service == "memories-api"

    def test_second_call_is_ignored(self, root_logger: logging.Logger):
        """Test repeated configuration keeps the first setup."""
        configure_logging("memories-api", "INFO")
        configure_logging("other", "DEBUG")

        assert len(root_logger.handlers) == 1
        assert StructuredLogger._service_name == "memories-api"
        assert root_logger.level == logging.INFO


class TestEventHelpers:
    """Tests for event-specific log helpers."""

    def test_folder_resolved_fields(self, caplog: pytest.LogCaptureFixture):
        """Test folder resolution logs the event fields without clashing with LogRecord attributes."""
        logger = logging.getLogger("tests.logging")
        caplog.set_level(logging.INFO, logger="tests.logging")

        log_folder_resolved(logger, folder_name="DugunAnilari_2024-06-01", folder_id="f1", created=True, duration_ms=1.234)

        record = caplog.records[-1]
        assert record.event == "folder_resolved"
        assert record.folder_name == "DugunAnilari_2024-06-01"
        assert record.folder_id == "f1"
        assert record.folder_created is True
        assert record.duration_ms == 1.23
        assert record.getMessage() == "Folder created: DugunAnilari_2024-06-01 (f1)"
