"""
Tests for logging utilities.
"""

import json
import logging
from unittest.mock import Mock, patch

import pytest

from ozb_deal_notifier.utils import logging as notifier_logging
from ozb_deal_notifier.utils.logging import (
    ROOT_LOGGER_NAME,
    ComponentLogger,
    LoggingManager,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    notifier_logging._logging_manager = None
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()


class TestComponentLogger:
    """Test cases for ComponentLogger."""

    def test_component_logger_initialization(self):
        """Test component logger initialization."""
        logger = ComponentLogger("test_component", {"key": "value"})

        assert logger.component_name == "test_component"
        assert logger.extra_context == {"key": "value"}
        assert logger.logger.name == "ozb_deal_notifier.test_component"

    def test_format_message(self):
        """Test message formatting."""
        logger = ComponentLogger("test_component", {"context_key": "context_value"})

        formatted = logger._format_message("Test message", {"extra_key": "extra_value"})

        assert formatted["component"] == "test_component"
        assert formatted["message"] == "Test message"
        assert formatted["context_key"] == "context_value"
        assert formatted["extra_key"] == "extra_value"
        assert "timestamp" in formatted

    def test_log_methods(self):
        """Test different log level methods."""
        with patch("logging.getLogger") as mock_get_logger:
            mock_logger = Mock()
            mock_get_logger.return_value = mock_logger

            logger = ComponentLogger("test_component")

            logger.debug("Debug message", {"key": "value"})
            mock_logger.debug.assert_called_once()

            logger.info("Info message")
            mock_logger.info.assert_called_once()

            logger.warning("Warning message")
            mock_logger.warning.assert_called_once()

            logger.error("Error message", exc_info=True)
            mock_logger.error.assert_called_once()
            assert mock_logger.error.call_args.kwargs["exc_info"] is True

    def test_structured_logging_format(self):
        """Test that log messages are properly structured as JSON."""
        with patch("logging.getLogger") as mock_get_logger:
            mock_logger = Mock()
            mock_get_logger.return_value = mock_logger

            logger = ComponentLogger("scheduler", {"context": "test"})
            logger.info("Test message", {"sent": 3})

            payload = json.loads(mock_logger.info.call_args.args[0])
            assert payload["component"] == "scheduler"
            assert payload["message"] == "Test message"
            assert payload["context"] == "test"
            assert payload["sent"] == 3


class TestLoggingManager:
    """Test cases for LoggingManager."""

    def test_stdout_only(self):
        manager = LoggingManager(log_dir=None, log_level="DEBUG")
        root = logging.getLogger(ROOT_LOGGER_NAME)

        assert manager.log_dir is None
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_rotating_file_handlers(self, temp_dir):
        LoggingManager(log_dir=str(temp_dir / "logs"), log_level="INFO")
        root = logging.getLogger(ROOT_LOGGER_NAME)

        files = sorted(
            getattr(h, "baseFilename", "").rsplit("/", 1)[-1] for h in root.handlers
        )
        assert files == ["", "errors.log", "ozb_deal_notifier.log"]
        assert (temp_dir / "logs").is_dir()

    def test_errors_reach_error_log(self, temp_dir):
        manager = LoggingManager(log_dir=str(temp_dir), log_level="INFO")
        logger = manager.get_component_logger("orchestrator")

        logger.info("routine")
        logger.error("broken", {"guid": "g1"})
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        errors = (temp_dir / "errors.log").read_text()
        assert "broken" in errors
        assert "routine" not in errors
        assert "routine" in (temp_dir / "ozb_deal_notifier.log").read_text()

    def test_get_component_logger_cached(self):
        manager = LoggingManager(log_dir=None)

        assert manager.get_component_logger("a") is manager.get_component_logger("a")
        assert manager.get_component_logger("a") is not manager.get_component_logger(
            "a", {"k": 1}
        )

    def test_set_log_level(self, temp_dir):
        manager = LoggingManager(log_dir=str(temp_dir), log_level="INFO")
        manager.set_log_level("WARNING")

        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert root.level == logging.WARNING
        for handler in root.handlers:
            if "errors.log" in getattr(handler, "baseFilename", ""):
                assert handler.level == logging.ERROR
            else:
                assert handler.level == logging.WARNING


class TestGlobalFunctions:
    """Test cases for module-level helpers."""

    def test_get_logger_without_setup(self):
        logger = get_logger("server")

        assert isinstance(logger, ComponentLogger)
        assert logger.component_name == "server"

    def test_setup_logging(self):
        manager = setup_logging(log_dir=None, log_level="INFO")

        assert get_logger("main") is manager.get_component_logger("main")
