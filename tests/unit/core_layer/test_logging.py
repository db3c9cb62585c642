"""
Unit Tests for Logging Module

Tests logger configuration, request context, and logging processors.
"""

from unittest.mock import MagicMock

import pytest

from tiercache.core.config.constants import LOG_KEY_MAX_LENGTH, Stage
from tiercache.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    add_timestamp,
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
    truncate_cache_key,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        logger = get_logger(__name__)
        assert logger is not None
        assert hasattr(logger, "info")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging_accepts_both_formats(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format)
        get_logger("tiercache.test").info("configured", stage="TEST")


@pytest.mark.unit
class TestRequestContext:
    """Test request ID context management."""

    def test_set_and_get_request_id(self):
        set_request_id("req-123")
        try:
            assert get_request_id() == "req-123"
        finally:
            clear_request_id()

    def test_clear_request_id(self):
        set_request_id("req-123")
        clear_request_id()
        assert get_request_id() is None

    def test_add_request_id_processor(self):
        set_request_id("req-9")
        try:
            event = add_request_id(None, "info", {"event": "x"})
        finally:
            clear_request_id()
        assert event["request_id"] == "req-9"

    def test_add_request_id_skips_when_unset(self):
        clear_request_id()
        assert "request_id" not in add_request_id(None, "info", {"event": "x"})


@pytest.mark.unit
class TestProcessors:
    """Test the custom structlog processors."""

    def test_timestamp_is_utc_iso(self):
        event = add_timestamp(None, "info", {})
        assert event["timestamp"].endswith("Z")

    def test_level_is_upper_cased(self):
        assert add_log_level_name(None, "info", {"level": "info"})["level"] == "INFO"

    def test_long_cache_key_is_truncated(self):
        key = "k" * (LOG_KEY_MAX_LENGTH + 10)
        event = truncate_cache_key(None, "info", {"cache_key": key})
        assert event["cache_key"] == "k" * LOG_KEY_MAX_LENGTH + "..."

    def test_short_cache_key_is_kept(self):
        assert truncate_cache_key(None, "info", {"cache_key": "short"})["cache_key"] == "short"


@pytest.mark.unit
class TestLogStage:
    """Test the log_stage helper."""

    def test_log_stage_uses_enum_value(self):
        logger = MagicMock()
        log_stage(logger, Stage.PROMOTION, "promoted", cache_key="abc")

        logger.debug.assert_called_once_with("promoted", stage="C.5_PROMOTION", cache_key="abc")

    def test_log_stage_respects_level(self):
        logger = MagicMock()
        log_stage(logger, "S.2", "selected", level="info")

        logger.info.assert_called_once_with("selected", stage="S.2")
