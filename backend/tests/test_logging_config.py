"""
Tests for structured JSON logging configuration.

This module tests:
- JSONFormatter (JSON log output)
- setup_logging() (logging configuration)
- get_logger() (logger factory)

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import io
import json
import logging

import pytest

from storefront.core.logging_config import JSONFormatter, get_logger, mask_email, mask_phone, setup_logging


@pytest.fixture
def capture():
    """Logger writing through JSONFormatter into a string buffer."""

    def _capture(name: str, level: int = logging.INFO):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = []
        logger.propagate = False
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        return logger, stream

    return _capture


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_basic_message(self, capture):
        """
        Test JSONFormatter outputs valid JSON.

        Arrange: Logger with JSONFormatter
        Act: Log a message
        Assert: Output is valid JSON with required fields
        """
        # Arrange
        logger, stream = capture("storefront.test.basic")

        # Act
        logger.info("Order recorded")

        # Assert
        log_data = json.loads(stream.getvalue().strip())
        assert log_data["level"] == "INFO"
        assert log_data["message"] == "Order recorded"
        assert log_data["logger"] == "storefront.test.basic"
        assert "timestamp" in log_data

    def test_extra_fields(self, capture):
        logger, stream = capture("storefront.test.extra")

        logger.info(
            "Request completed",
            extra={"request_id": "abc-123", "path": "/api/inventory", "status_code": 200, "latency_ms": 12.5},
        )

        log_data = json.loads(stream.getvalue().strip())
        assert log_data["request_id"] == "abc-123"
        assert log_data["path"] == "/api/inventory"
        assert log_data["status_code"] == 200
        assert log_data["latency_ms"] == 12.5

    def test_none_extras_omitted(self, capture):
        logger, stream = capture("storefront.test.none")

        logger.info("Request started", extra={"query_params": None, "method": "GET"})

        log_data = json.loads(stream.getvalue().strip())
        assert "query_params" not in log_data
        assert log_data["method"] == "GET"

    def test_exception(self, capture):
        """
        Test JSONFormatter includes exception details.

        Arrange: Logger with JSONFormatter
        Act: Log an exception
        Assert: Traceback included in the JSON output
        """
        # Arrange
        logger, stream = capture("storefront.test.exc", logging.ERROR)

        # Act
        try:
            raise ValueError("Gateway exploded")
        except ValueError:
            logger.error("Checkout failed", exc_info=True)

        # Assert
        log_data = json.loads(stream.getvalue().strip())
        assert "ValueError: Gateway exploded" in log_data["exception"]

    def test_non_serializable_extra(self, capture):
        logger, stream = capture("storefront.test.obj")

        logger.info("Odd value", extra={"thing": object()})

        assert "thing" in json.loads(stream.getvalue().strip())

    def test_contact_details_masked(self, capture):
        logger, stream = capture("storefront.test.mask")

        logger.warning("Unknown admin", extra={"email": "owner@bigdawgs.test", "phone": "+919800001234"})

        log_data = json.loads(stream.getvalue().strip())
        assert log_data["email"] == "o***@bigdawgs.test"
        assert log_data["phone"] == "***1234"


class TestMasking:

    @pytest.mark.parametrize("value, expected", [
        ("driver@example.com", "d***@example.com"),
        ("not-an-email", "***"),
    ])
    def test_mask_email(self, value, expected):
        assert mask_email(value) == expected

    def test_short_phone_fully_hidden(self):
        assert mask_phone("123") == "***"


class TestSetupLogging:

    def test_json_handler_installed(self, restore_root_logger):
        setup_logging(level="DEBUG", json_format=True)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_plain_format(self, restore_root_logger):
        setup_logging(level="WARNING", json_format=False)

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        setup_logging(level="CHATTY")

        assert restore_root_logger.level == logging.INFO

    def test_noisy_libraries_quietened(self, restore_root_logger):
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_get_logger_returns_named_logger():
    assert get_logger("storefront.services.checkout").name == "storefront.services.checkout"
