"""
Tests for utility modules.
"""

import logging
from unittest.mock import patch
from src.utils.logging import (
    setup_logger, set_global_log_level, configure_debug_logging,
    silence_external_loggers, CLIENT_LOGGERS, DEBUG_FORMAT,
)


TEST_LOGGERS = [
    "test_logger", "test_debug", "test_custom", "test_no_timestamp",
    "test_no_duplicate", "test_stream", "test_formatter",
]


class TestLogging:
    """Test logging utilities."""

    def test_setup_logger_default(self):
        """Test default logger setup."""
        logger = setup_logger("test_logger")
        assert logger.name == "test_logger"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_setup_logger_debug(self):
        logger = setup_logger("test_debug", level=logging.DEBUG)
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG

    def test_setup_logger_custom_format(self):
        custom_format = "%(name)s - %(message)s"
        logger = setup_logger("test_custom", format_string=custom_format)
        assert logger.handlers[0].formatter._fmt == custom_format

    def test_setup_logger_no_timestamp(self):
        logger = setup_logger("test_no_timestamp", include_timestamp=False)
        assert "%(asctime)s" not in logger.handlers[0].formatter._fmt

    def test_setup_logger_no_duplicate_handlers(self):
        """Test that setup_logger doesn't add duplicate handlers."""
        logger1 = setup_logger("test_no_duplicate")
        logger2 = setup_logger("test_no_duplicate")

        assert logger1 is logger2
        assert len(logger1.handlers) == 1

    @patch("sys.stderr")
    def test_logger_writes_to_stderr(self, mock_stderr):
        """Test that log output stays off stdout."""
        logger = setup_logger("test_stream")
        assert logger.handlers[0].stream == mock_stderr

    def test_logger_formatter_content(self):
        logger = setup_logger("test_formatter")
        record = logging.LogRecord(
            name="test_formatter",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="-> NICK alice",
            args=(),
            exc_info=None
        )

        formatted = logger.handlers[0].formatter.format(record)
        assert "test_formatter" in formatted
        assert "INFO" in formatted
        assert "-> NICK alice" in formatted

    def test_set_global_log_level(self):
        set_global_log_level(logging.WARNING)

        assert logging.getLogger().level == logging.WARNING
        for name in CLIENT_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_configure_debug_logging(self):
        logger = setup_logger("src.irc")
        configure_debug_logging()

        assert logging.getLogger().level == logging.DEBUG
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].formatter._fmt == DEBUG_FORMAT

    def test_silence_external_loggers(self):
        silence_external_loggers()

        assert logging.getLogger("asyncio").level == logging.WARNING
        assert logging.getLogger("rich").level == logging.WARNING

    def teardown_method(self):
        """Clean up loggers after each test."""
        for logger_name in TEST_LOGGERS + CLIENT_LOGGERS:
            logger = logging.getLogger(logger_name)
            for handler in logger.handlers[:]:
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
        logging.getLogger().setLevel(logging.WARNING)
