"""Tests for the correlation-aware logger."""

import logging

import pytest

from nsdom.shared import get_logger


class TestCorrelationLogger:
    """Test the fixed and per-call extras on log records."""

    def test_component_defaults_to_module(self) -> None:
        """Test that the component is the last part of the logger name."""
        logger = get_logger("nsdom.pull.reader")

        assert logger.component == "reader"
        assert logger.logger.name == "nsdom.pull.reader"

    def test_record_extras(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that records carry component, correlation ID and call extras."""
        caplog.set_level(logging.DEBUG, logger="nsdom.test")
        logger = get_logger("nsdom.test", "req-7", "writer")

        logger.debug("Token read", extra={"depth": 2})

        record = next(r for r in caplog.records if r.getMessage() == "Token read")
        assert record.component == "writer"
        assert record.correlation_id == "req-7"
        assert record.depth == 2

    def test_call_extras_do_not_leak(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that extras of one call are not carried into the next."""
        caplog.set_level(logging.INFO, logger="nsdom.test")
        logger = get_logger("nsdom.test")

        logger.info("first", extra={"path": "a.xml"})
        logger.warning("second")

        record = next(r for r in caplog.records if r.getMessage() == "second")
        assert record.levelno == logging.WARNING
        assert record.correlation_id is None
        assert not hasattr(record, "path")
