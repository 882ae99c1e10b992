"""
Unit tests for the logging setup.
"""
import json
import logging

import pytest

from queuelens.shared.config.settings import Settings
from queuelens.shared.logging.logger import JSONFormatter, get_logger, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def _own_handlers(root):
    return [h for h in root.handlers if getattr(h, "queuelens", False)]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_from_name(self, root_logger):
        setup_logging("warning")
        assert root_logger.level == logging.WARNING

    def test_repeated_calls_keep_one_handler(self, root_logger):
        setup_logging("INFO")
        setup_logging("DEBUG", "json")

        handlers = _own_handlers(root_logger)
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, JSONFormatter)
        assert root_logger.level == logging.DEBUG

    def test_foreign_handlers_survive(self, root_logger):
        foreign = logging.NullHandler()
        root_logger.addHandler(foreign)

        setup_logging()

        assert foreign in root_logger.handlers

    def test_noisy_libraries_are_quiet(self, root_logger):
        setup_logging("DEBUG")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("aiomysql").level == logging.WARNING

    @pytest.mark.parametrize("level, fmt", [("LOUD", "text"), ("INFO", "xml")])
    def test_invalid_values(self, root_logger, level, fmt):
        with pytest.raises(ValueError):
            setup_logging(level, fmt)

    def test_settings_defaults(self):
        s = Settings()
        assert s.log_level == "INFO"
        assert s.log_format == "text"


class TestJSONFormatter:
    """Tests for the one-line JSON format."""

    def test_format(self):
        record = logging.LogRecord(
            "queuelens.analytics_cache", logging.INFO, __file__, 1,
            "Cache invalidado | shop=%s", ("S1",), None,
        )
        record.shop_id = "S1"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "queuelens.analytics_cache"
        assert entry["message"] == "Cache invalidado | shop=S1"
        assert entry["shop_id"] == "S1"
        assert entry["timestamp"].endswith("+00:00")


class TestGetLogger:
    """Tests for the queuelens.* namespace."""

    def test_namespace(self):
        assert get_logger("calculator").name == "queuelens.calculator"

    def test_calculator_uses_the_namespace(self):
        from queuelens.domain.services import queue_analytics_calculator

        assert queue_analytics_calculator.logger.name == "queuelens.calculator"
